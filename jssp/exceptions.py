"""Exception hierarchy shared by the scheduling core and its collaborators.

Invalid input and unknown rules are ``ValueError`` subclasses, scheduling
failures are ``RuntimeError`` subclasses, so callers that only know the
builtin types still catch them.
"""

from __future__ import annotations


class JSSPError(Exception):
    """Base class for every error raised by the ``jssp`` package."""


class InvalidProblemError(JSSPError, ValueError):
    """Problem data is absent or malformed (bad ids, non-positive duration)."""


class UnknownRuleError(JSSPError, ValueError):
    """Requested dispatch rule does not exist."""


class SchedulingError(JSSPError, RuntimeError):
    """The engine could not produce a complete schedule."""


class UnsatisfiablePrecedenceError(SchedulingError):
    """No operation is ready while some operations are still unscheduled."""


class RoundBudgetExceededError(SchedulingError):
    """The round budget ran out before every operation was scheduled."""


class IncompleteScheduleError(SchedulingError):
    """A schedule expected to be complete still has unscheduled operations."""
