"""mobclaw - An autonomous task agent that operates a device through an LLM tool-use loop."""

from .platform.server.app import create_app
from .platform.settings import Settings


def app():
    """Create the FastAPI application instance."""
    settings = Settings()
    return create_app(settings)
