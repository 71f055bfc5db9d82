"""
Domain Records
==============
Plain dataclasses for the things a mind map is made of.

The scene treats every instance as a read-only snapshot; only
MindMapViewModel mutates them.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


def _now() -> datetime:
    return datetime.now()


class ThoughtCategory(str, Enum):
    """What kind of thought a node represents. Drives the node color."""
    IDEA = "idea"
    TASK = "task"
    QUESTION = "question"
    NOTE = "note"
    INSIGHT = "insight"
    REMINDER = "reminder"

    @property
    def color(self) -> str:
        return _CATEGORY_COLORS[self]

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


_CATEGORY_COLORS: dict[ThoughtCategory, str] = {
    ThoughtCategory.IDEA: "#FFC857",
    ThoughtCategory.TASK: "#4F9DDE",
    ThoughtCategory.QUESTION: "#B084CC",
    ThoughtCategory.NOTE: "#9AA5B1",
    ThoughtCategory.INSIGHT: "#5FBF8F",
    ThoughtCategory.REMINDER: "#F2777A",
}


@dataclass(eq=False)
class Thought:
    """
    A user-captured idea.

    Position (0, 0) means "never placed"; the scene assigns a spiral slot
    to such thoughts when it first renders them.
    """
    content: str
    category: ThoughtCategory = ThoughtCategory.IDEA
    position_x: float = 0.0
    position_y: float = 0.0
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    @property
    def position(self) -> tuple[float, float]:
        return self.position_x, self.position_y

    @property
    def has_stored_position(self) -> bool:
        return not (self.position_x == 0.0 and self.position_y == 0.0)

    def __hash__(self) -> int:
        return hash(self.id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Thought):
            return NotImplemented
        return self.id == other.id


@dataclass(eq=False)
class Connection:
    """
    A weighted link between two thoughts.

    Either endpoint may be None once the thought it pointed at has been
    deleted; such connections are kept but never drawn.
    """
    source_thought: Optional[Thought]
    target_thought: Optional[Thought]
    strength: float = 0.5
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=_now)

    def __post_init__(self) -> None:
        if not 0.0 <= self.strength <= 1.0:
            raise ValueError(f"Connection strength must be within [0, 1], got {self.strength}.")

    @property
    def source_id(self) -> Optional[uuid.UUID]:
        return self.source_thought.id if self.source_thought is not None else None

    @property
    def target_id(self) -> Optional[uuid.UUID]:
        return self.target_thought.id if self.target_thought is not None else None

    def links(self, a: Thought, b: Thought) -> bool:
        """True if this connection joins a and b, in either direction."""
        ends = {self.source_id, self.target_id}
        return ends == {a.id, b.id}

    def __hash__(self) -> int:
        return hash(self.id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Connection):
            return NotImplemented
        return self.id == other.id


@dataclass
class Cluster:
    """A named group of thoughts. Not rendered by the scene."""
    name: str
    thought_ids: set[uuid.UUID] = field(default_factory=set)
    id: uuid.UUID = field(default_factory=uuid.uuid4)
