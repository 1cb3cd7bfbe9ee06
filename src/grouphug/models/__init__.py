"""Pure frozen dataclasses with zero I/O for GroupHug submissions.

The models layer is the bottom of the package. It depends only on the
standard library and [grouphug.exceptions][grouphug.exceptions]. Every
model uses ``@dataclass(frozen=True, slots=True)`` and validates in
``__post_init__`` so invalid instances never escape the constructor.

Attributes:
    TransactionSubmission: Validated, immutable hex payload plus the
        ``add_tx`` command encoding.
    SubmissionOutcome: Tagged accepted / rejected / unavailable result.
    Alert: Status class and message text for an outcome.
    OutcomeStatus: Enum tag of a SubmissionOutcome.
    AlertClass: Enum of display status classes.
"""

from .constants import (
    ADD_TX_COMMAND,
    DEFAULT_MAX_GREETING_LENGTH,
    DEFAULT_MAX_PAYLOAD_LENGTH,
    DEFAULT_MAX_REPLY_LENGTH,
    MAX_LINE_LENGTH,
    OK_REPLY,
    AlertClass,
    OutcomeStatus,
)
from .outcome import Alert, SubmissionOutcome
from .submission import TransactionSubmission, validate_payload


__all__ = [
    "ADD_TX_COMMAND",
    "DEFAULT_MAX_GREETING_LENGTH",
    "DEFAULT_MAX_PAYLOAD_LENGTH",
    "DEFAULT_MAX_REPLY_LENGTH",
    "MAX_LINE_LENGTH",
    "OK_REPLY",
    "Alert",
    "AlertClass",
    "OutcomeStatus",
    "SubmissionOutcome",
    "TransactionSubmission",
    "validate_payload",
]
