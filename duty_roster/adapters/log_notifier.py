"""Logging notification adapter: implements NotificationPort.

Writes each message to the log instead of delivering it. Used for dry runs
from the command line.
"""

from __future__ import annotations

import logging

from duty_roster.data.models import Person

logger = logging.getLogger(__name__)


class LogNotifier:
    """Log-only implementation of NotificationPort."""

    async def send_message(self, person: Person, text: str) -> None:
        logger.info("To %s <%s>: %s", person.name, person.email or person.phone, text)
