"""
Activation graph: a write-only view of each best-decision search.

The engine reports which decisions are loaded, which of them were scored
during a search and which one won. Observers only receive data; nothing they
do feeds back into selection.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

# Score reported for entries that were not evaluated in the last search
DEFAULT_SCORE = -1.0


class ActivationObserver:
    """
    Receives notifications from a DecisionEngine.

    All methods are no-ops; subclass and override what you need.
    """

    def reset(self, names: Sequence[str]) -> None:
        """The active set changed; ``names`` lists it in sorted order."""

    def update(self, index: int, score: float) -> None:
        """The decision at ``index`` of the active set scored ``score``."""

    def finalize(self, best_index: Optional[int], scanned: int) -> None:
        """
        A search finished.

        Args:
            best_index: Index of the winner in the active set, or None when
                nothing was activated
            scanned: Number of leading entries that were scored
        """


@dataclass
class ActivationEntry:
    """One row of the activation graph."""
    name: str
    score: float = DEFAULT_SCORE

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "score": self.score}


@dataclass
class ActivationGraph(ActivationObserver):
    """
    In-memory activation graph.

    Attributes:
        entries: One entry per active decision, in active-set order
        best_index: Index of the last winner (None before the first search)
        searches: Number of completed searches since creation
    """
    entries: List[ActivationEntry] = field(default_factory=list)
    best_index: Optional[int] = None
    searches: int = 0

    def reset(self, names: Sequence[str]) -> None:
        self.entries = [ActivationEntry(name) for name in names]
        self.best_index = None

    def update(self, index: int, score: float) -> None:
        if 0 <= index < len(self.entries):
            self.entries[index].score = score

    def finalize(self, best_index: Optional[int], scanned: int) -> None:
        for entry in self.entries[scanned:]:
            entry.score = DEFAULT_SCORE
        self.best_index = best_index
        self.searches += 1

    @property
    def best(self) -> Optional[ActivationEntry]:
        """Entry of the last winner, if any."""
        if self.best_index is None or self.best_index >= len(self.entries):
            return None
        return self.entries[self.best_index]

    def to_dict(self) -> Dict[str, Any]:
        """Export as dictionary."""
        return {
            "entries": [e.to_dict() for e in self.entries],
            "best_index": self.best_index,
            "searches": self.searches,
        }
