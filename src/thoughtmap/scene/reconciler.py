"""
Scene Reconciliation
Set difference between the ids the view-model holds and the ids the scene
has already drawn.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Hashable, Iterable, TypeVar

K = TypeVar("K", bound=Hashable)


@dataclass
class Reconciliation:
    """Outcome of one sync cycle, with every list in a stable order."""
    added: list = field(default_factory=list)
    removed: list = field(default_factory=list)
    retained: list = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.added and not self.removed

    def __str__(self) -> str:
        return f"+{len(self.added)} -{len(self.removed)} ={len(self.retained)}"


def reconcile(current_ids: Iterable[K], rendered_ids: Iterable[K]) -> Reconciliation:
    """
    Compare model ids with rendered ids.

    Args:
        current_ids: Ids present in the view-model, in model order.
        rendered_ids: Ids the scene currently has sprites for.

    Returns:
        Reconciliation where `added` and `retained` follow model order and
        `removed` follows the rendered order. Repeated model ids count once.
    """
    # dict keeps first-seen order and drops repeats
    current = dict.fromkeys(current_ids)
    rendered = dict.fromkeys(rendered_ids)

    result = Reconciliation()
    for key in current:
        if key in rendered:
            result.retained.append(key)
        else:
            result.added.append(key)
    result.removed = [key for key in rendered if key not in current]
    return result
