"""Validated transaction payloads.

A [TransactionSubmission][grouphug.models.submission.TransactionSubmission]
is the only thing the client ever sends. Construction validates the payload,
so holding an instance proves the payload is a non-empty, even-length hex
string within the configured bound and no network call is ever made for
invalid input.

The payload is opaque: it is never decoded into bytes or parsed as a
transaction here. The backend does that.

Examples:
    ```python
    submission = validate_payload("0200000001ab")
    submission.to_command()  # b'add_tx 0200000001ab'

    validate_payload("abc")  # raises InvalidPayload (odd length)
    ```
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from grouphug.exceptions import InvalidPayload

from ._validation import validate_positive_int
from .constants import ADD_TX_COMMAND, DEFAULT_MAX_PAYLOAD_LENGTH


_HEX_PAIRS = re.compile(r"(?:[0-9a-fA-F]{2})+")


@dataclass(frozen=True, slots=True)
class TransactionSubmission:
    """Immutable, validated hex-encoded transaction.

    Attributes:
        payload: Hex string, case preserved as received.
        max_length: Bound the payload was validated against. Not part of
            equality or the repr.

    Raises:
        InvalidPayload: If *payload* is not a string, is empty, has odd
            length, contains non-hex characters, or exceeds *max_length*.
        TypeError: If *max_length* is not an int.
        ValueError: If *max_length* is not positive.
    """

    payload: str
    max_length: int = field(default=DEFAULT_MAX_PAYLOAD_LENGTH, repr=False, compare=False)

    def __post_init__(self) -> None:
        validate_positive_int(self.max_length, "max_length")
        _check_payload(self.payload, self.max_length)

    def __len__(self) -> int:
        return len(self.payload)

    def to_command(self) -> bytes:
        """Encode the single ``add_tx <hex>`` command line (no trailing newline)."""
        return f"{ADD_TX_COMMAND} {self.payload}".encode("ascii")


def _check_payload(payload: Any, max_length: int) -> None:
    if not isinstance(payload, str):
        raise InvalidPayload(f"payload must be a str, got {type(payload).__name__}")
    if not payload:
        raise InvalidPayload("payload is empty")
    if len(payload) > max_length:
        raise InvalidPayload(f"payload length {len(payload)} exceeds maximum {max_length}")
    if len(payload) % 2:
        raise InvalidPayload("payload has odd length")
    if _HEX_PAIRS.fullmatch(payload) is None:
        raise InvalidPayload("payload is not hexadecimal")


def validate_payload(
    payload: Any, max_length: int = DEFAULT_MAX_PAYLOAD_LENGTH
) -> TransactionSubmission:
    """Validate raw user input and wrap it in a submission.

    Args:
        payload: Raw value from the caller (typically a form field).
        max_length: Maximum accepted number of hex characters.

    Returns:
        The validated [TransactionSubmission][grouphug.models.submission.TransactionSubmission].

    Raises:
        InvalidPayload: If the payload fails any validity rule.
    """
    return TransactionSubmission(payload, max_length=max_length)
