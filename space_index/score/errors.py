"""Scoring engine exceptions."""
from __future__ import annotations


class ScoringError(Exception):
    """Base class for all SCI engine errors."""


class ConfigurationError(ScoringError):
    """Scoring configuration failed its integrity checks.

    Raised at load time. The engine refuses to score with a broken table
    rather than renormalizing it.
    """


class ScoringValidationError(ScoringError, ValueError):
    """Caller supplied inputs the engine cannot score."""
