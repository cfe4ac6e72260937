"""
Central configuration for engine tunables, evaluator weights, rules and logging.
Pydantic models give type-safe configuration management.
"""
from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "FLYING_CHECKERS_"


def _env(name: str, default: str) -> str:
    return os.getenv(ENV_PREFIX + name, default)


def _env_bool(name: str, default: bool) -> bool:
    return _env(name, "true" if default else "false").lower() == "true"


class EngineSettings(BaseModel):
    """Search engine configuration settings."""

    medium_depth: int = Field(default=2, ge=0, le=10, description="Plies searched after the root move (medium tier)")
    hard_depth: int = Field(default=6, ge=0, le=10, description="Plies searched after the root move (hard tier)")
    parallel_search: bool = Field(default=False, description="Score root candidates in a process pool")
    workers: Optional[int] = Field(default=None, ge=1, description="Process pool size (None = CPU count)")
    seed: Optional[int] = Field(default=None, description="Seed for tie-breaking and the easy tier")

    @field_validator('medium_depth', 'hard_depth', mode='before')
    @classmethod
    def validate_int_fields(cls, v):
        return int(v)


class EvaluatorSettings(BaseModel):
    """Heuristic evaluator weights. Read-only while a search is running."""

    man_value: float = Field(default=1.0, description="Material value of a man")
    king_value: float = Field(default=3.0, description="Material value of a king")
    advancement_bonus: float = Field(default=0.2, description="Bonus per row a man has travelled")
    center_bonus: float = Field(default=0.3, description="Bonus for a piece in rows/cols 2..5")
    man_threat_penalty: float = Field(default=3.0, description="Penalty per attacker of a man")
    king_threat_penalty: float = Field(default=6.0, description="Penalty per attacker of a king")
    positional_scale: float = Field(default=10.0, gt=0, description="Multiplier applied before mobility is added")


class GameRulesSettings(BaseModel):
    """Session rule switches (the capture rules themselves are fixed)."""

    allow_undo: bool = Field(default=True, description="Allow undoing moves")

    @field_validator('allow_undo', mode='before')
    @classmethod
    def validate_bool_fields(cls, v):
        return bool(v)


class LoggingSettings(BaseModel):
    """Logging configuration."""

    log_level: str = Field(default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)")
    log_to_file: bool = Field(default=False, description="Write logs to file")
    log_file_path: str = Field(default="flying_checkers.log", description="Log file path")

    @field_validator('log_level', mode='before')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR']
        v_upper = v.upper() if isinstance(v, str) else str(v).upper()
        if v_upper not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v_upper


class CheckersConfig(BaseModel):
    """Main configuration model."""

    engine: EngineSettings = Field(default_factory=EngineSettings)
    evaluator: EvaluatorSettings = Field(default_factory=EvaluatorSettings)
    rules: GameRulesSettings = Field(default_factory=GameRulesSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    version: str = Field(default="1.0.0", description="Configuration version")
    config_file: Optional[str] = Field(default=None, description="Path to config file")

    @classmethod
    def from_env(cls) -> 'CheckersConfig':
        """Create configuration from environment variables."""
        seed = _env('SEED', '')
        workers = _env('WORKERS', '')
        return cls(
            engine=EngineSettings(
                medium_depth=int(_env('MEDIUM_DEPTH', '2')),
                hard_depth=int(_env('HARD_DEPTH', '6')),
                parallel_search=_env_bool('PARALLEL', False),
                workers=int(workers) if workers else None,
                seed=int(seed) if seed else None,
            ),
            rules=GameRulesSettings(
                allow_undo=_env_bool('ALLOW_UNDO', True),
            ),
            logging=LoggingSettings(
                log_level=_env('LOG_LEVEL', 'INFO'),
                log_to_file=_env_bool('LOG_FILE', False),
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()

    def save_to_file(self, filepath: str) -> None:
        """Save configuration to JSON file."""
        config_dict = self.to_dict()
        config_dict['config_file'] = filepath
        with open(filepath, 'w') as f:
            json.dump(config_dict, f, indent=2)

    @classmethod
    def load_from_file(cls, filepath: str) -> 'CheckersConfig':
        """Load configuration from JSON file."""
        with open(filepath, 'r') as f:
            data = json.load(f)

        return cls(
            engine=EngineSettings(**data.get('engine', {})),
            evaluator=EvaluatorSettings(**data.get('evaluator', {})),
            rules=GameRulesSettings(**data.get('rules', {})),
            logging=LoggingSettings(**data.get('logging', {})),
            version=data.get('version', '1.0.0'),
            config_file=filepath,
        )


# Global configuration instance
_config: Optional[CheckersConfig] = None


def get_config() -> CheckersConfig:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = CheckersConfig.from_env()
    return _config


def set_config(config: CheckersConfig) -> None:
    global _config
    _config = config


def load_config_from_file(filepath: str) -> CheckersConfig:
    """Load configuration from file and update global instance."""
    global _config
    _config = CheckersConfig.load_from_file(filepath)
    return _config


def reset_config() -> None:
    """Reset the global configuration to defaults."""
    global _config
    _config = None


def get_engine_settings() -> EngineSettings:
    return get_config().engine


def get_evaluator_settings() -> EvaluatorSettings:
    return get_config().evaluator


def get_game_rules() -> GameRulesSettings:
    return get_config().rules


def get_logging_settings() -> LoggingSettings:
    return get_config().logging


def setup_logging() -> None:
    """Configure root logging once, controlled by LoggingSettings."""
    if getattr(setup_logging, "_configured", False):
        return
    settings = get_logging_settings()
    level: int = getattr(logging, settings.log_level, logging.INFO)
    kwargs: Dict[str, Any] = {}
    if settings.log_to_file:
        kwargs["filename"] = settings.log_file_path
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        **kwargs,
    )
    setup_logging._configured = True  # type: ignore[attr-defined]
