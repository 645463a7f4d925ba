# src/forget_me_not/errors.py

"""
Error taxonomy.

Only SchedulerUnavailable crosses the scheduler facade. Everything else is
either rejected before a Task exists (ConfigurationError) or absorbed and
logged inside the scheduler thread.
"""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Malformed duration/time or an invalid clock rule."""


class SchedulerUnavailable(RuntimeError):
    """The scheduler's background thread has terminated."""


class NotifyError(RuntimeError):
    """A notification could not be delivered."""


class SignalClosed(RuntimeError):
    """A stop signal was sent to a clock that already finished."""


class ProtocolError(ValueError):
    """Malformed client/daemon message."""
