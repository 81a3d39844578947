"""
Behaviour files.

Decisions can be declared in JSON or YAML instead of code. Signals and
actions are referenced by name and bound to callables from registries the
host passes to BehaviorSet.install().

Example (YAML):

    decisions:
      - name: Flee
        description: Run when badly hurt
        utility: MostUseful
        events: [ALWAYS]
        action: flee
        considerations:
          - description: low health
            signal: health
            range: [0, 100]
            curve: {kind: monotone, points: [[0, 1], [0.3, 0.8], [1, 0]]}
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Hashable, List, Mapping, Optional

import yaml

from .config import read_structured_file
from .consideration import NO_RESCALE, Consideration, UtilityFunction
from .curves import PARAMETRIC_CURVES, POINT_CURVES, CurveFunction
from .decision import Action, Decision, UtilityScore
from .engine import DecisionEngine
from .errors import ConstructionError

logger = logging.getLogger(__name__)


@dataclass
class CurveSpec:
    """
    Declarative description of a response curve.

    Attributes:
        kind: Curve family name (see POINT_CURVES and PARAMETRIC_CURVES)
        points: Control points for point-based families
        params: Keyword arguments for parametric families
    """
    kind: str = "identity"
    points: List[List[float]] = field(default_factory=list)
    params: Dict[str, float] = field(default_factory=dict)

    def build(self) -> CurveFunction:
        """Build the curve function."""
        kind = self.kind.strip().lower()
        if kind in POINT_CURVES:
            return POINT_CURVES[kind](self.points)
        if kind in PARAMETRIC_CURVES:
            try:
                return PARAMETRIC_CURVES[kind](**self.params)
            except TypeError as e:
                raise ConstructionError(f"Bad parameters for {kind} curve: {e}") from e
        raise ConstructionError(f"Unknown curve kind: {self.kind!r}")

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"kind": self.kind}
        if self.points:
            data["points"] = [list(p) for p in self.points]
        if self.params:
            data["params"] = dict(self.params)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CurveSpec":
        return cls(
            kind=data.get("kind", "identity"),
            points=[list(p) for p in data.get("points", [])],
            params=dict(data.get("params", {})),
        )


@dataclass
class ConsiderationSpec:
    """Declarative description of a Consideration."""
    description: str
    signal: str
    range: List[float] = field(default_factory=lambda: list(NO_RESCALE))
    curve: CurveSpec = field(default_factory=CurveSpec)

    def build(self, signals: Mapping[str, UtilityFunction]) -> Consideration:
        """Bind the signal by name and build the Consideration."""
        if self.signal not in signals:
            raise ConstructionError(
                f"Consideration '{self.description}': unknown signal {self.signal!r}"
            )
        if len(self.range) != 2:
            raise ConstructionError(
                f"Consideration '{self.description}': range needs two values"
            )
        return Consideration(
            description=self.description,
            signal=signals[self.signal],
            curve=self.curve.build(),
            input_range=(self.range[0], self.range[1]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "signal": self.signal,
            "range": list(self.range),
            "curve": self.curve.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConsiderationSpec":
        return cls(
            description=data.get("description", ""),
            signal=data["signal"],
            range=list(data.get("range", NO_RESCALE)),
            curve=CurveSpec.from_dict(data.get("curve", {})),
        )


@dataclass
class DecisionSpec:
    """Declarative description of a Decision."""
    name: str
    description: str = ""
    utility: str = UtilityScore.USEFUL.name
    events: List[str] = field(default_factory=list)
    considerations: List[ConsiderationSpec] = field(default_factory=list)
    action: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "utility": self.utility,
            "events": list(self.events),
            "considerations": [c.to_dict() for c in self.considerations],
            "action": self.action,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DecisionSpec":
        utility = data.get("utility", UtilityScore.USEFUL.name)
        if isinstance(utility, int):
            utility = UtilityScore.parse(utility).name
        return cls(
            name=data["name"],
            description=data.get("description", ""),
            utility=str(utility),
            events=[str(e) for e in data.get("events", [])],
            considerations=[
                ConsiderationSpec.from_dict(c) for c in data.get("considerations", [])
            ],
            action=data.get("action"),
        )


class BehaviorSet:
    """
    A collection of DecisionSpecs that can be installed into an engine.

    Example:
        >>> behaviors = BehaviorSet.load("guard.yaml")
        >>> behaviors.install(engine, signals={"health": get_health},
        ...                   actions={"flee": flee}, event_type=Event)
    """

    def __init__(self, decisions: Optional[List[DecisionSpec]] = None):
        self.decisions: List[DecisionSpec] = list(decisions or [])

    def __len__(self) -> int:
        return len(self.decisions)

    def to_dict(self) -> Dict[str, Any]:
        return {"decisions": [d.to_dict() for d in self.decisions]}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BehaviorSet":
        """
        Parse a behaviour document.

        Raises:
            ConstructionError: If a required field is missing
        """
        try:
            return cls([DecisionSpec.from_dict(d) for d in data.get("decisions", [])])
        except (KeyError, TypeError, AttributeError) as e:
            raise ConstructionError(f"Malformed behaviour document: {e!r}") from e

    @classmethod
    def load(cls, path: str) -> "BehaviorSet":
        """
        Load a behaviour file (JSON, or YAML by extension).

        Raises:
            FileNotFoundError: If the file does not exist
            ConstructionError: If the file cannot be parsed
        """
        try:
            data = read_structured_file(path)
        except (ValueError, yaml.YAMLError) as e:
            raise ConstructionError(f"Failed to parse behaviour file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConstructionError(f"Behaviour file {path} is not a mapping")

        behaviors = cls.from_dict(data)
        logger.info(f"Loaded {len(behaviors)} decision(s) from {path}")
        return behaviors

    def save(self, path: str) -> None:
        """Save as JSON."""
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

    def install(
        self,
        engine: DecisionEngine,
        signals: Mapping[str, UtilityFunction],
        actions: Optional[Mapping[str, Action]] = None,
        event_type: Optional[Callable[[str], Hashable]] = None,
    ) -> List[Decision]:
        """
        Register every declared decision with an engine.

        Every decision is bound and validated before the first one is
        registered, so a failed install leaves the engine unchanged.

        Args:
            engine: Target engine
            signals: Signal callables by name
            actions: Action callables by name
            event_type: Converts event names to event values. Enum classes
                are looked up by member name; other callables are called
                with the name. None keeps the names as strings.

        Returns:
            All Decisions created in the engine

        Raises:
            ConstructionError: On unknown signals, actions, events or curves,
                and on names that are empty, repeated or already registered
        """
        actions = actions or {}
        bound = []
        seen = set()
        for spec in self.decisions:
            if not spec.name:
                raise ConstructionError("Decision name cannot be empty")
            if spec.name in seen or engine.has_decision(spec.name):
                raise ConstructionError(f"Decision '{spec.name}' is already registered")
            seen.add(spec.name)
            bound.append((
                spec.name,
                spec.description,
                UtilityScore.parse(spec.utility),
                [_convert_event(e, event_type) for e in spec.events],
                [c.build(signals) for c in spec.considerations],
                _bind_action(spec, actions),
            ))

        created: List[Decision] = []
        for args in bound:
            created.extend(engine.add_decision(*args))
        return created


def _bind_action(spec: DecisionSpec, actions: Mapping[str, Action]) -> Optional[Action]:
    if spec.action is None:
        return None
    action = actions.get(spec.action)
    if action is None:
        raise ConstructionError(f"Decision '{spec.name}': unknown action {spec.action!r}")
    if not callable(action):
        raise ConstructionError(f"Decision '{spec.name}': action {spec.action!r} is not callable")
    return action


def _convert_event(name: str, event_type: Optional[Callable[[str], Hashable]]) -> Hashable:
    if event_type is None:
        return name
    try:
        if isinstance(event_type, type) and issubclass(event_type, Enum):
            return event_type[name]
        return event_type(name)
    except (KeyError, ValueError) as e:
        raise ConstructionError(f"Unknown event: {name!r}") from e
