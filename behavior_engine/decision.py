"""
Decisions: named candidate behaviours.

A Decision bundles a utility tier, an ordered list of Considerations and an
action. Its score is the tier value multiplied by the (weighted) scores of
its considerations, so a Decision can never score above its own tier.
"""
from __future__ import annotations

import logging
import time
from enum import IntEnum
from typing import Callable, Iterable, List, Optional, Union

from .consideration import Consideration
from .errors import ConstructionError

logger = logging.getLogger(__name__)

# Below this running total the remaining considerations are skipped
SCORE_EPSILON = 1e-6

# Timestamp of a decision that has never been executed
NEVER_EXECUTED = 0.0

Action = Callable[["Decision"], None]
Clock = Callable[[], float]


class UtilityScore(IntEnum):
    """
    Discrete priority tier of a Decision.

    The value is both a multiplicative weight and the ceiling of the
    decision's score. IGNORE decisions are never selected.
    """
    IGNORE = 0
    SLIGHTLY_USEFUL = 1
    USEFUL = 2
    VERY_USEFUL = 3
    MOST_USEFUL = 4

    @classmethod
    def parse(cls, value: Union[str, int, "UtilityScore"]) -> "UtilityScore":
        """
        Parse a tier from an int or a name.

        Accepts "VERY_USEFUL", "very_useful", "VeryUseful" and 3 alike.

        Raises:
            ConstructionError: If the value names no tier
        """
        if isinstance(value, cls):
            return value
        try:
            if isinstance(value, int):
                return cls(value)
            key = str(value).strip()
            if key.isdigit():
                return cls(int(key))
            # CamelCase -> SNAKE_CASE
            snake = "".join(
                f"_{c}" if c.isupper() and i > 0 and key[i - 1].islower() else c
                for i, c in enumerate(key)
            )
            return cls[snake.upper()]
        except (KeyError, ValueError) as e:
            raise ConstructionError(f"Unknown utility score: {value!r}") from e


class Decision:
    """
    Container for an action that is performed when it seems useful.

    Attributes:
        name: Label of the decision, unique within an engine
        description: Free text
        utility: Priority tier
        considerations: Ordered considerations, evaluated in this order
        action: Callable invoked with this Decision when executed
        last_executed: Clock reading of the last execution (0.0 = never)

    Example:
        >>> d = Decision("Idle", "Stand around", UtilityScore.USEFUL, [], lambda d: None)
        >>> d.compute_score()
        2.0
    """

    def __init__(
        self,
        name: str,
        description: str,
        utility: Union[UtilityScore, int, str],
        considerations: Optional[Iterable[Consideration]] = None,
        action: Optional[Action] = None,
        clock: Clock = time.monotonic,
    ):
        """
        Initialize a decision.

        Args:
            name: Decision name
            description: Free text description
            utility: Priority tier (enum, int or name)
            considerations: Considerations in evaluation order
            action: Callable receiving this Decision; None means no-op
            clock: Source of execution timestamps
        """
        if not name:
            raise ConstructionError("Decision name must not be empty")
        if action is not None and not callable(action):
            raise ConstructionError(f"Decision '{name}': action is not callable")

        self._name = name
        self._description = description
        self._utility = UtilityScore.parse(utility)
        self._considerations: tuple = tuple(considerations or ())
        self._action: Action = action or _no_action
        self._clock = clock
        self.last_executed: float = NEVER_EXECUTED

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def utility(self) -> UtilityScore:
        return self._utility

    @property
    def considerations(self) -> List[Consideration]:
        return list(self._considerations)

    @property
    def action(self) -> Action:
        return self._action

    def compute_score(self) -> float:
        """
        Calculate the usefulness of this decision.

        Multiplying several sub-unity scores shrinks the product as more
        considerations are added, even when each of them is strong. For
        example three considerations of 0.9 give 0.729 while a single
        consideration of 0.75 gives 0.75. Each score ``s`` is therefore
        lifted by ``(1 - s) * w * s`` with ``w = 1 - 1/N`` before it is
        multiplied in. With one consideration ``w`` is 0 and the score is
        used as is.

        Evaluation stops as soon as the running total drops below
        SCORE_EPSILON.

        Returns:
            Score between 0 and the tier value
        """
        total = float(self._utility)
        if not self._considerations:
            return total

        modification = 1.0 - 1.0 / len(self._considerations)
        for consideration in self._considerations:
            score = consideration.compute_score()
            total *= score + (1.0 - score) * modification * score
            if total < SCORE_EPSILON:
                break
        return total

    def execute(self) -> None:
        """Run the action with this decision, then record the timestamp."""
        self._action(self)
        self.last_executed = self._clock()

    def time_since_execution(self, now: Optional[float] = None) -> float:
        """Seconds elapsed since the last execution (by the decision's clock)."""
        if now is None:
            now = self._clock()
        return now - self.last_executed

    def is_never_executed(self) -> bool:
        return self.last_executed == NEVER_EXECUTED

    def __repr__(self) -> str:
        return (
            f"Decision(name={self._name!r}, utility={self._utility.name}, "
            f"considerations={len(self._considerations)})"
        )


def _no_action(decision: Decision) -> None:
    logger.debug(f"Decision '{decision.name}' has no action")
