"""
Decision engine.

The engine stores Decisions per Event and keeps a working set of "active"
Decisions loaded from the raised Events. Every tick the host asks for the
best active Decision; the search walks the active set in descending tier
order and stops as soon as no remaining candidate can beat the current best.

The engine is single-threaded and synchronous. Signal and action callables
run inline and must not add, raise or clear events on the same engine while
a search is running; defer such changes to the next tick.
"""
from __future__ import annotations

import logging
import time
from typing import Dict, Hashable, Iterable, List, Optional, Sequence, Set, Tuple

from .activation import ActivationGraph, ActivationObserver
from .config import EngineConfig
from .consideration import Consideration
from .decision import Action, Clock, Decision, UtilityScore
from .errors import ConstructionError, EmptyActiveSetError, NoActivationError
from .logging_config import EngineLogAdapter

logger = logging.getLogger(__name__)

Event = Hashable
Rule = Tuple[Event, Decision]

# Scores are never negative, so the first scored candidate always becomes the best
SEARCH_BASELINE = -1.0


class DecisionEngine:
    """
    Lazily selects the Decision with the highest score from an active subset.

    Each Decision is registered under one or more Events. Raising an Event
    loads its Decisions into the active set; clearing it unloads them. The
    active set holds references to the registered Decisions, so executing a
    winner updates the same record that is scored on the next tick.

    Example:
        >>> engine = DecisionEngine()
        >>> _ = engine.add_decision(
        ...     "Wander", "Walk around", UtilityScore.USEFUL, ["always"],
        ...     [Consideration("boredom", lambda: 0.8)], lambda d: None,
        ... )
        >>> engine.raise_event("always")
        >>> engine.get_best_decision().name
        'Wander'
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        observer: Optional[ActivationObserver] = None,
        clock: Clock = time.monotonic,
    ):
        """
        Initialize the engine.

        Args:
            config: Engine configuration (defaults to EngineConfig())
            observer: Optional activation observer notified during searches
            clock: Timestamp source handed to every Decision
        """
        self.config = config or EngineConfig()
        if observer is None and self.config.record_activation:
            observer = ActivationGraph()
        self.observer = observer
        self._clock = clock

        self._rules: Dict[Event, List[Decision]] = {}
        self._active: List[Rule] = []
        self._active_events: Set[Event] = set()
        self._dirty_events: Set[Event] = set()
        self._names: Set[str] = set()
        self._tick = 0
        self._log = EngineLogAdapter(logger, self.config.engine_id, lambda: self._tick)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add_decision(
        self,
        name: str,
        description: str,
        utility: UtilityScore,
        events: Iterable[Event],
        considerations: Optional[Sequence[Consideration]] = None,
        action: Optional[Action] = None,
    ) -> List[Decision]:
        """
        Add a new Decision to the rules.

        One independent Decision is created per event. If an event is active
        right now, its new Decision is loaded into the active set as well.

        Args:
            name: Decision name, unique within this engine
            description: Free text
            utility: Priority tier
            events: Events the decision is registered under
            considerations: Considerations in evaluation order
            action: Callable receiving the Decision when executed

        Returns:
            The created Decisions, one per event

        Raises:
            ConstructionError: If the name is already registered or the
                decision cannot be built
        """
        if name in self._names:
            raise ConstructionError(f"Decision '{name}' is already registered")
        if isinstance(events, (str, bytes)):
            events = [events]

        considerations = list(considerations or [])
        created: List[Decision] = []
        for event in dict.fromkeys(events):
            decision = Decision(
                name, description, utility, considerations, action, clock=self._clock
            )
            self._rules.setdefault(event, []).append(decision)
            if event in self._active_events:
                self._active.append((event, decision))
            self._dirty_events.add(event)
            created.append(decision)

        if not created:
            self._log.warning(f"Decision '{name}' has no events and will never be loaded")
            return created

        self._names.add(name)
        self._log.debug(
            f"Added decision '{name}' ({created[0].utility.name}) "
            f"under {len(created)} event(s)"
        )
        return created

    def has_decision(self, name: str) -> bool:
        """Whether a Decision with this name is registered."""
        return name in self._names

    # ------------------------------------------------------------------
    # Activation
    # ------------------------------------------------------------------

    def raise_event(self, event: Event) -> None:
        """
        Load the Decisions associated with an event.

        Decisions of other raised events stay loaded. Raising an event that
        is already active only applies pending sorts.
        """
        if self._dirty_events:
            self._sort_decisions()
        if event in self._active_events:
            return

        for decision in self._rules.get(event, []):
            self._active.append((event, decision))
        self._active_events.add(event)
        self._sort_active_decisions()
        self._notify_reset()
        self._log.event(
            "raise", f"Raised event {event!r}: {len(self._active)} active decision(s)"
        )

    def raise_events(self, events: Iterable[Event]) -> None:
        """Raise several events in order."""
        for event in events:
            self.raise_event(event)

    def clear_event(self, event: Event) -> None:
        """
        Unload the Decisions associated with an event.

        The registered rules are kept, so the event can be raised again.
        This might leave the engine empty.
        """
        self._active = [rule for rule in self._active if rule[0] != event]
        self._active_events.discard(event)
        self._notify_reset()
        self._log.event(
            "clear", f"Cleared event {event!r}: {len(self._active)} active decision(s)"
        )

    def clear_active(self) -> None:
        """Unload everything. Use raise_event() to load Decisions again."""
        self._active = []
        self._active_events = set()
        self._notify_reset()

    def clear(self) -> None:
        """Forget all registered Decisions, active or not."""
        self.clear_active()
        self._rules = {}
        self._dirty_events = set()
        self._names = set()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_active_events(self) -> List[Event]:
        """Snapshot of the active events, sorted."""
        return sorted(self._active_events)

    def get_active_decisions(self) -> List[Decision]:
        """
        Snapshot of the active Decisions in descending tier order.

        Pending sorts are applied to the copy only. The engine and its
        observer are left untouched, so inspectors may call this freely.
        """
        active = list(self._active)
        if self._dirty_events:
            active.sort(key=lambda rule: _utility_key(rule[1]))
        return [decision for _, decision in active]

    def get_rules(self, event: Event) -> List[Decision]:
        """Snapshot of the Decisions registered under an event, sorted."""
        rules = list(self._rules.get(event, []))
        if event in self._dirty_events:
            rules.sort(key=_utility_key)
        return rules

    @property
    def events(self) -> List[Event]:
        """All events with registered Decisions, sorted."""
        return sorted(self._rules)

    @property
    def tick(self) -> int:
        """Number of searches started so far."""
        return self._tick

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def get_best_decision(self) -> Decision:
        """
        Select the active Decision with the highest score.

        The active set is sorted by descending tier and no Decision can
        score above its tier value, so the scan stops at the first candidate
        whose tier is below the best score so far (or is IGNORE). It also
        stops when a candidate reaches its own tier value, which nothing
        later can exceed.

        Returns:
            The winning Decision (the registered instance, not a copy)

        Raises:
            EmptyActiveSetError: If no Decision is active
            NoActivationError: If no active Decision scored above zero
        """
        if self._dirty_events:
            self._sort_decisions()
        if not self._active:
            raise EmptyActiveSetError("Empty active rule set")

        self._tick += 1
        trace = self.config.trace_scores
        highest = SEARCH_BASELINE
        best_index: Optional[int] = None
        scanned = 0

        for index, (_, decision) in enumerate(self._active):
            utility = float(decision.utility)
            if utility < highest or utility == 0:
                if trace:
                    reason = "utility = 0" if utility == 0 else "utility < highest"
                    self._log.debug(f"  Stopping at '{decision.name}': {reason}")
                break

            score = decision.compute_score()
            scanned = index + 1
            self._notify_update(index, score)
            if trace:
                self._log.debug(f"  Decision '{decision.name}' utility {utility:g} "
                                f"scored {score:.6f}", extra={"decision": decision.name})

            if score > highest:
                highest = score
                best_index = index
                if score == utility:
                    break

        if best_index is None or highest <= 0:
            self._notify_finalize(None, scanned)
            raise NoActivationError("No rule was activated")

        self._notify_finalize(best_index, scanned)
        winner = self._active[best_index][1]
        self._log.event(
            "select",
            f"Selected '{winner.name}' with score {highest:.4f} "
            f"({scanned}/{len(self._active)} scored)",
            decision=winner.name,
        )
        return winner

    def execute_best_decision(self) -> Decision:
        """Select the Decision with the highest score and run its action."""
        start = time.perf_counter()
        decision = self.get_best_decision()
        decision.execute()
        self._log.latency(
            f"Execute '{decision.name}'",
            (time.perf_counter() - start) * 1000,
            decision=decision.name,
        )
        return decision

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _sort_decisions(self) -> None:
        """
        Sort rules of every dirty event by descending tier.

        Sorting is stable, so decisions of equal tier keep their
        registration order. The active set is resorted once if any dirty
        event is active.
        """
        resort_active = False
        for event in self._dirty_events:
            rules = self._rules.get(event)
            if rules:
                rules.sort(key=_utility_key)
            if event in self._active_events:
                resort_active = True
        self._dirty_events = set()

        if resort_active:
            self._sort_active_decisions()
            self._notify_reset()

    def _sort_active_decisions(self) -> None:
        self._active.sort(key=lambda rule: _utility_key(rule[1]))

    def _notify_reset(self) -> None:
        if self.observer is None:
            return
        try:
            self.observer.reset([decision.name for _, decision in self._active])
        except Exception as e:
            self._log.warning(f"Activation observer error: {e}")

    def _notify_update(self, index: int, score: float) -> None:
        if self.observer is None:
            return
        try:
            self.observer.update(index, score)
        except Exception as e:
            self._log.warning(f"Activation observer error: {e}")

    def _notify_finalize(self, best_index: Optional[int], scanned: int) -> None:
        if self.observer is None:
            return
        try:
            self.observer.finalize(best_index, scanned)
        except Exception as e:
            self._log.warning(f"Activation observer error: {e}")


def _utility_key(decision: Decision) -> int:
    return -int(decision.utility)
