"""Bugsnag error reporting integration."""

import logging

import bugsnag
from bugsnag.handlers import BugsnagHandler


def initialize_bugsnag(api_key: str | None, release_stage: str) -> bool:
    """Send ERROR-level log records to Bugsnag.

    Args:
        api_key: Bugsnag project API key
        release_stage: "production", "development" or "local"

    Returns:
        True if reporting was enabled. Local runs and missing keys are a no-op.
    """
    if release_stage == "local" or not api_key:
        return False

    bugsnag.configure(
        api_key=api_key,
        release_stage=release_stage,
        auto_notify=True,
    )
    root_logger = logging.getLogger()
    if not any(isinstance(h, BugsnagHandler) for h in root_logger.handlers):
        handler = BugsnagHandler()
        handler.setLevel(logging.ERROR)
        root_logger.addHandler(handler)
    return True
