"""
Errors
======

Failure taxonomy for the arena core.
"""

from __future__ import annotations


class ArenaError(Exception):
    """Base class for arena failures."""


class ConfigurationError(ArenaError, ValueError):
    """Degenerate setup (bad population, non-positive arena size, ...)."""


class PhysicsUnavailableError(ArenaError, RuntimeError):
    """The physics collaborator could not be created or is missing."""


class InvariantViolation(ArenaError, AssertionError):
    """Internal bookkeeping drifted from a guaranteed invariant."""
