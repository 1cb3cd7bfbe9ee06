"""Shared constants for the models layer.

Wire-protocol literals, default bounds, and the enumerations used by
[SubmissionOutcome][grouphug.models.outcome.SubmissionOutcome] and
[Alert][grouphug.models.outcome.Alert]. Placing them here lets ``utils``
and ``core`` share them without importing each other.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Final


# ---------------------------------------------------------------------------
# Wire protocol
# ---------------------------------------------------------------------------

ADD_TX_COMMAND: Final[str] = "add_tx"
"""Command verb written by the client, followed by a space and the hex payload."""

OK_REPLY: Final[str] = "Ok"
"""Exact reply line that signals the backend accepted the transaction."""

# ---------------------------------------------------------------------------
# Default bounds
# ---------------------------------------------------------------------------

DEFAULT_MAX_PAYLOAD_LENGTH: Final[int] = 100 * 1024
"""Hex characters accepted per payload (the backend reads at most 100 KiB per command)."""

DEFAULT_MAX_REPLY_LENGTH: Final[int] = 128
DEFAULT_MAX_GREETING_LENGTH: Final[int] = 16
MAX_LINE_LENGTH: Final[int] = 1024
"""Upper bound any configured reply/greeting cap may take."""


class OutcomeStatus(StrEnum):
    """Tag of a [SubmissionOutcome][grouphug.models.outcome.SubmissionOutcome].

    Attributes:
        ACCEPTED: The backend replied ``Ok``.
        REJECTED: The backend replied anything else, closed without a
            reply, or the payload failed local validation.
        UNAVAILABLE: The exchange could not be completed (connect, write,
            read timeout or reset).
    """

    ACCEPTED = "accepted"
    REJECTED = "rejected"
    UNAVAILABLE = "unavailable"


class AlertClass(StrEnum):
    """Display status class handed to the (external) web layer."""

    SUCCESS = "alert-success"
    WARNING = "alert-warning"
    DANGER = "alert-danger"
