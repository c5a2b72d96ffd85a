"""
QVote TOML Configuration Loader

Loads qvote.toml at startup with environment variable overrides.
Each [section] maps to a dataclass with from_dict / apply_env / validate.

Environment variable mapping:
    [voting] max_votes          → QVOTE_MAX_VOTES
    [voting] proposal_duration  → QVOTE_PROPOSAL_DURATION
    [logging] level             → QVOTE_LOG_LEVEL
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

if sys.version_info >= (3, 11):
    import tomllib as tomli
else:
    import tomli

from ..constants import (
    BALANCE_BITS,
    FREEZE_REASON,
    MAX_VOTES,
    PROPOSAL_DURATION,
    PROPOSAL_ID_BITS,
)
from ..exceptions import ConfigurationError
from ..logger import get_logger

logger = get_logger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


@dataclass
class VotingConfig:
    """[voting] section."""
    max_votes: int = MAX_VOTES
    proposal_duration: int = PROPOSAL_DURATION
    proposal_id_bits: int = PROPOSAL_ID_BITS
    balance_bits: int = BALANCE_BITS
    freeze_reason: str = FREEZE_REASON

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VotingConfig":
        return cls(
            max_votes=data.get("max_votes", MAX_VOTES),
            proposal_duration=data.get("proposal_duration", PROPOSAL_DURATION),
            proposal_id_bits=data.get("proposal_id_bits", PROPOSAL_ID_BITS),
            balance_bits=data.get("balance_bits", BALANCE_BITS),
            freeze_reason=data.get("freeze_reason", FREEZE_REASON),
        )

    def apply_env(self) -> None:
        """Override from environment variables."""
        if v := os.environ.get("QVOTE_MAX_VOTES"):
            self.max_votes = _env_int("QVOTE_MAX_VOTES", v)
        if v := os.environ.get("QVOTE_PROPOSAL_DURATION"):
            self.proposal_duration = _env_int("QVOTE_PROPOSAL_DURATION", v)

    def validate(self) -> None:
        if not isinstance(self.max_votes, int) or self.max_votes < 1:
            raise ConfigurationError("max_votes must be >= 1")
        if not isinstance(self.proposal_duration, int) or self.proposal_duration < 0:
            raise ConfigurationError("proposal_duration must be >= 0")
        if not 8 <= self.proposal_id_bits <= 128:
            raise ConfigurationError(
                f"proposal_id_bits must be between 8 and 128, got {self.proposal_id_bits}"
            )
        if not 8 <= self.balance_bits <= 256:
            raise ConfigurationError(
                f"balance_bits must be between 8 and 256, got {self.balance_bits}"
            )
        if not self.freeze_reason:
            raise ConfigurationError("freeze_reason cannot be empty")


@dataclass
class LoggingConfig:
    """[logging] section."""
    level: str = "INFO"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingConfig":
        return cls(level=str(data.get("level", "INFO")).upper())

    def apply_env(self) -> None:
        if v := os.environ.get("QVOTE_LOG_LEVEL"):
            self.level = v.upper()

    def validate(self) -> None:
        if self.level not in _LOG_LEVELS:
            raise ConfigurationError(f"Invalid log level: {self.level}")


def _env_int(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from None


# -----------------------------------------------------------------------
# Top-level config
# -----------------------------------------------------------------------

@dataclass
class EngineConfig:
    """
    Unified engine configuration.

    Loads every section of qvote.toml and applies environment variable
    overrides.
    """
    voting: VotingConfig = field(default_factory=VotingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        """Create EngineConfig from a parsed TOML dict."""
        return cls(
            voting=VotingConfig.from_dict(data.get("voting", {})),
            logging=LoggingConfig.from_dict(data.get("logging", {})),
        )

    @classmethod
    def from_file(cls, config_path: str) -> "EngineConfig":
        """
        Load configuration from a TOML file.

        A missing file yields defaults (with env overrides applied).

        Raises:
            ConfigurationError: if the file is not valid TOML
        """
        path = Path(config_path)
        if not path.exists():
            logger.warning("Config file not found: %s, using defaults", config_path)
            cfg = cls()
            cfg.apply_env()
            return cfg

        with open(path, "rb") as f:
            try:
                raw = tomli.load(f)
            except tomli.TOMLDecodeError as e:
                raise ConfigurationError(f"Invalid TOML in {config_path}: {e}") from e

        cfg = cls.from_dict(raw)
        cfg.apply_env()
        return cfg

    def apply_env(self) -> None:
        """Apply environment variable overrides to all sections."""
        self.voting.apply_env()
        self.logging.apply_env()

    def validate(self) -> bool:
        """
        Validate all configuration sections.

        Raises:
            ConfigurationError: on invalid config
        """
        self.voting.validate()
        self.logging.validate()
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict (for diagnostics, NOT for re-creating TOML)."""
        return {
            "voting": {
                "max_votes": self.voting.max_votes,
                "proposal_duration": self.voting.proposal_duration,
                "proposal_id_bits": self.voting.proposal_id_bits,
                "balance_bits": self.voting.balance_bits,
                "freeze_reason": self.voting.freeze_reason,
            },
            "logging": {
                "level": self.logging.level,
            },
        }


def load_config(path: Optional[str] = None) -> EngineConfig:
    """
    Load engine configuration.

    Resolution order:
        1. Explicit *path* argument
        2. QVOTE_CONFIG env var
        3. ./qvote.toml in current directory
        4. Defaults (with env overrides)
    """
    if path is None:
        path = os.environ.get("QVOTE_CONFIG", "qvote.toml")

    cfg = EngineConfig.from_file(path)
    cfg.validate()
    return cfg
