"""Content node model - items of the external note hierarchy."""

from dataclasses import dataclass
from typing import Any, Literal

ScopeType = Literal["this_node", "children", "siblings", "ancestors", "all"]

SCOPE_TYPES: tuple[ScopeType, ...] = ("this_node", "children", "siblings", "ancestors", "all")


@dataclass(frozen=True)
class ContentNode:
    """
    A read-only corpus item supplied by the note store.

    The core never mutates these; hierarchy is expressed only through parent_id.
    """

    id: str
    name: str = ""
    note: str | None = None
    parent_id: str | None = None

    @property
    def text(self) -> str:
        """Title and note joined the way every matcher sees them."""
        return f"{self.name or ''} {self.note or ''}"

    def to_dict(self) -> dict:
        """Convert to a plain dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "note": self.note,
            "parent_id": self.parent_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ContentNode":
        """Create from a corpus record."""
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            note=data.get("note"),
            parent_id=data.get("parent_id"),
        )
