"""
QVote Configuration

Loads qvote.toml at startup.
Environment variables override TOML values.
"""

from .loader import (
    EngineConfig,
    LoggingConfig,
    VotingConfig,
    load_config,
)

__all__ = [
    "EngineConfig",
    "LoggingConfig",
    "VotingConfig",
    "load_config",
]
