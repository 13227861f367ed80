"""Error taxonomy for roster generation and storage."""

from __future__ import annotations


class RosterError(Exception):
    """Base class for every duty roster error."""


class InvalidConfiguration(RosterError):
    """A duty's recurrence rule or the working-day set is malformed."""


class NoEligiblePeople(RosterError):
    """No active people are available to take a duty."""


class AssignmentNotFound(RosterError):
    """Raised when an operation targets an unknown assignment id."""


class DuplicateAssignment(RosterError):
    """Raised when a write would repeat an existing (duty, person, date)."""
