"""
Configuration module for BarShift.

Handles grid defaults, the remembered note-shift strategy, and undo
depth, persisted as JSON in the user's config directory.
"""

import json
import logging
from pathlib import Path
from dataclasses import dataclass, field, asdict
from typing import Optional

logger = logging.getLogger(__name__)

# Key under which the last-chosen strategy is stored.
STRATEGY_KEY = "moveNotesSidewaysStrategy"


@dataclass
class GridConfig:
    """Default grid for new songs."""
    parts_per_beat: int = 24
    beats_per_bar: int = 8


@dataclass
class ShiftConfig:
    """Settings for moving notes sideways."""
    last_strategy: str = "overflow"  # "overflow" or "wrapAround"


@dataclass
class HistoryConfig:
    """Settings for undo/redo."""
    max_undo: int = 50


@dataclass
class Config:
    """
    Main configuration class for BarShift.

    Handles loading/saving settings to a JSON file in the config directory.
    """

    # Sub-configurations
    grid: GridConfig = field(default_factory=GridConfig)
    shift: ShiftConfig = field(default_factory=ShiftConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)

    # Application directories
    config_dir: Path = field(default_factory=lambda: Path.home() / ".bar_shift")
    _config_file: Path = field(default=None)

    def __post_init__(self):
        """Initialize configuration paths."""
        self.config_dir = Path(self.config_dir)
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self._config_file = self.config_dir / "config.json"

    @property
    def config_file(self) -> Path:
        """Get the path of the JSON settings file."""
        return self._config_file

    def save(self) -> None:
        """Save configuration to disk."""
        data = {
            "grid": asdict(self.grid),
            STRATEGY_KEY: self.shift.last_strategy,
            "history": asdict(self.history),
        }

        with open(self._config_file, "w") as f:
            json.dump(data, f, indent=2)

    @classmethod
    def load(cls, config_dir: Optional[Path] = None) -> "Config":
        """Load configuration from disk or create default."""
        config = cls(config_dir=config_dir) if config_dir is not None else cls()

        if config._config_file.exists():
            try:
                with open(config._config_file, "r") as f:
                    data = json.load(f)

                if "grid" in data:
                    config.grid = GridConfig(**data["grid"])
                if "history" in data:
                    config.history = HistoryConfig(**data["history"])
                config.shift.last_strategy = data.get(STRATEGY_KEY, config.shift.last_strategy)

            except (json.JSONDecodeError, TypeError, KeyError) as e:
                logger.warning(f"Could not load config file: {e}")

        return config

    def remember_strategy(self, strategy: str) -> None:
        """Store the strategy chosen last, so it becomes the next default."""
        self.shift.last_strategy = strategy
        self.save()
