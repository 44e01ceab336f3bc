"""Screen snapshot model.

A ScreenState is what the agent sees of the device: the foreground package and
a flat list of UI nodes. It is rendered as compact text for the LLM.
"""

from dataclasses import dataclass, field
from typing import Any, Self

MAX_INDENT_DEPTH = 4


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


@dataclass(frozen=True)
class Bounds:
    left: int
    top: int
    right: int
    bottom: int

    @property
    def center(self) -> tuple[int, int]:
        return (self.left + self.right) // 2, (self.top + self.bottom) // 2


@dataclass(frozen=True)
class ScreenNode:
    """A UI element on screen with the properties useful for LLM decisions."""

    id: str
    class_name: str
    bounds: Bounds
    resource_id: str | None = None
    text: str | None = None
    content_description: str | None = None
    hint_text: str | None = None
    state_description: str | None = None
    is_clickable: bool = False
    is_long_clickable: bool = False
    is_scrollable: bool = False
    is_editable: bool = False
    is_checkable: bool = False
    is_checked: bool = False
    is_selected: bool = False
    is_focused: bool = False
    is_enabled: bool = True
    is_visible_to_user: bool = True
    depth: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        bounds = data.get("bounds") or {}
        if isinstance(bounds, (list, tuple)):
            left, top, right, bottom = bounds
        else:
            left = bounds.get("left", 0)
            top = bounds.get("top", 0)
            right = bounds.get("right", 0)
            bottom = bounds.get("bottom", 0)
        return cls(
            id=str(data["id"]),
            class_name=str(data.get("class_name") or "View"),
            bounds=Bounds(int(left), int(top), int(right), int(bottom)),
            resource_id=_optional_str(data.get("resource_id")),
            text=_optional_str(data.get("text")),
            content_description=_optional_str(data.get("content_description")),
            hint_text=_optional_str(data.get("hint_text")),
            state_description=_optional_str(data.get("state_description")),
            is_clickable=data.get("clickable", False),
            is_long_clickable=data.get("long_clickable", False),
            is_scrollable=data.get("scrollable", False),
            is_editable=data.get("editable", False),
            is_checkable=data.get("checkable", False),
            is_checked=data.get("checked", False),
            is_selected=data.get("selected", False),
            is_focused=data.get("focused", False),
            is_enabled=data.get("enabled", True),
            is_visible_to_user=data.get("visible", True),
            depth=int(data.get("depth", 0)),
        )

    def properties(self) -> list[str]:
        props = []
        if self.is_clickable:
            props.append("clickable")
        if self.is_long_clickable:
            props.append("long-clickable")
        if self.is_scrollable:
            props.append("scrollable")
        if self.is_editable:
            props.append("editable")
        if self.is_checkable:
            props.append("checked" if self.is_checked else "unchecked")
        if self.is_selected:
            props.append("selected")
        if self.is_focused:
            props.append("focused")
        if not self.is_enabled:
            props.append("DISABLED")
        return props


@dataclass(frozen=True)
class ScreenState:
    """A snapshot of the current screen."""

    package_name: str
    nodes: list[ScreenNode] = field(default_factory=list)
    activity_name: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            package_name=str(data.get("package_name") or "unknown"),
            activity_name=_optional_str(data.get("activity_name")),
            nodes=[ScreenNode.from_dict(node) for node in data.get("nodes", [])],
        )

    @property
    def identifier(self) -> str:
        return self.package_name

    @property
    def visible_nodes(self) -> list[ScreenNode]:
        return [node for node in self.nodes if node.is_visible_to_user]

    @property
    def size(self) -> int:
        return len(self.visible_nodes)

    def find_node(self, node_id: str) -> ScreenNode | None:
        return next((node for node in self.nodes if node.id == node_id), None)

    def to_prompt_text(self) -> str:
        """Serialize to a compact text representation for the LLM context window."""
        lines = [f"## Current Screen: {self.package_name}"]
        if self.activity_name:
            lines.append(f"Activity: {self.activity_name}")
        lines.append(f"Found {len(self.nodes)} UI elements:")
        lines.append("")

        for node in self.visible_nodes:
            indent = "  " * min(node.depth, MAX_INDENT_DEPTH)
            header = f"{indent}[{node.id}] {node.class_name}"
            if node.resource_id:
                # "com.android.settings:id/title" -> "id/title"
                header += f" ({node.resource_id.split(':', 1)[-1]})"
            lines.append(header)

            for label, value in (
                ("text", node.text),
                ("desc", node.content_description),
                ("hint", node.hint_text),
                ("state", node.state_description),
            ):
                if value and value.strip():
                    lines.append(f'{indent}  {label}: "{value}"')

            props = node.properties()
            if props:
                lines.append(f"{indent}  [{', '.join(props)}]")

            b = node.bounds
            lines.append(f"{indent}  bounds: ({b.left},{b.top})-({b.right},{b.bottom})")

        return "\n".join(lines) + "\n"
