"""Port for rendering the default user-facing content of a new entity."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeAlias

if TYPE_CHECKING:
    from catalogsync.domain.model import EntityRevision


@dataclass(frozen=True, slots=True)
class Badge:
    content: str
    text_color: str = "blue"
    background_color: str = "blue"

    def as_dict(self) -> dict[str, str]:
        return {
            "content": self.content,
            "textColor": self.text_color,
            "backgroundColor": self.background_color,
        }


@dataclass(frozen=True, slots=True)
class DefaultContent:
    markdown: str
    badges: tuple[Badge, ...] = field(default_factory=tuple)
    summary: str | None = None

    def as_user_fields(self) -> dict[str, object]:
        fields: dict[str, object] = {
            "markdown": self.markdown,
            "badges": [badge.as_dict() for badge in self.badges],
        }
        if self.summary:
            fields["summary"] = self.summary
        return fields


RenderDefaults: TypeAlias = "Callable[[EntityRevision], DefaultContent]"


__all__ = ["Badge", "DefaultContent", "RenderDefaults"]
