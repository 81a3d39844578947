"""
Engine configuration.

Load engine settings from JSON or YAML files, or build them in code.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class EngineConfig:
    """
    Configuration for a DecisionEngine.

    Attributes:
        engine_id: Label used in log records and by the inspector
        trace_scores: Log every scored candidate at DEBUG during a search
        record_activation: Attach an in-memory ActivationGraph automatically
        log_level: Level passed to configure_logging() by drivers
    """
    engine_id: str = "default"
    trace_scores: bool = False
    record_activation: bool = False
    log_level: str = "INFO"

    def __post_init__(self):
        """Normalise values."""
        self.engine_id = str(self.engine_id).strip() or "default"
        self.trace_scores = bool(self.trace_scores)
        self.record_activation = bool(self.record_activation)
        level = str(self.log_level).upper()
        if level not in _LOG_LEVELS:
            logger.warning(f"Unknown log level {self.log_level!r}, using INFO")
            level = "INFO"
        self.log_level = level

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        """Create from dictionary, ignoring unknown keys."""
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})

    def save(self, path: str) -> None:
        """Save config to JSON file."""
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: str) -> Optional["EngineConfig"]:
        """Load config from JSON or YAML file. Returns None on failure."""
        if not os.path.exists(path):
            return None

        try:
            data = read_structured_file(path)
            if not isinstance(data, dict):
                logger.warning(f"Config in {path} is not a mapping")
                return None
            return cls.from_dict(data)
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config from {path}: {e}")
            return None


def read_structured_file(path: str) -> Any:
    """Read a JSON or YAML document, chosen by file extension."""
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()

    if path.endswith((".yaml", ".yml")):
        return yaml.safe_load(content)
    return json.loads(content)
