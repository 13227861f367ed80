"""Notification port: abstract interface for telling people about duties.

Core modules depend on this protocol, never on a specific messaging provider.
"""

from __future__ import annotations

from typing import Protocol

from duty_roster.data.models import Person


class NotificationPort(Protocol):
    """Abstract notification interface used by core modules."""

    async def send_message(self, person: Person, text: str) -> None: ...
