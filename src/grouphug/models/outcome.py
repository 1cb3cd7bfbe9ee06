"""Submission outcomes and their display mapping.

[SubmissionOutcome][grouphug.models.outcome.SubmissionOutcome] is the only
value the client hands back to its caller. It is a tagged result: accepted,
rejected (with the backend's reason), or service unavailable. The optional
chain identifier read from the backend greeting rides along for display.

[Alert][grouphug.models.outcome.Alert] maps an outcome to the status class
and message text the web layer shows; rendering itself happens elsewhere.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from ._validation import validate_instance
from .constants import AlertClass, OutcomeStatus


ACCEPTED_MESSAGE: Final[str] = "Transaction accepted!"
REJECTED_MESSAGE: Final[str] = "Transaction rejected."
INVALID_MESSAGE: Final[str] = "Invalid transaction received."
UNAVAILABLE_MESSAGE: Final[str] = "Service down, try again later."


@dataclass(frozen=True, slots=True)
class SubmissionOutcome:
    """Result of one submission.

    Build instances through the ``accepted()``, ``rejected()`` and
    ``unavailable()`` constructors rather than directly.

    Attributes:
        status: Which of the three outcomes this is.
        reason: Backend rejection text (or the validation error when
            ``invalid``). Always empty unless ``status`` is ``REJECTED``.
        chain: Chain identifier from the backend greeting, if one was read.
        invalid: True when the rejection came from local payload
            validation rather than from the backend.

    Raises:
        ValueError: If ``reason`` or ``invalid`` is set on a non-rejected
            outcome.
    """

    status: OutcomeStatus
    reason: str = ""
    chain: str | None = None
    invalid: bool = False

    def __post_init__(self) -> None:
        validate_instance(self.status, OutcomeStatus, "status")
        validate_instance(self.reason, str, "reason")
        if self.status is not OutcomeStatus.REJECTED and (self.reason or self.invalid):
            raise ValueError(f"{self.status} outcome cannot carry a rejection reason")

    @classmethod
    def accepted(cls, *, chain: str | None = None) -> SubmissionOutcome:
        return cls(OutcomeStatus.ACCEPTED, chain=chain)

    @classmethod
    def rejected(
        cls, reason: str, *, chain: str | None = None, invalid: bool = False
    ) -> SubmissionOutcome:
        return cls(OutcomeStatus.REJECTED, reason, chain, invalid)

    @classmethod
    def unavailable(cls, *, chain: str | None = None) -> SubmissionOutcome:
        return cls(OutcomeStatus.UNAVAILABLE, chain=chain)

    @property
    def is_accepted(self) -> bool:
        return self.status is OutcomeStatus.ACCEPTED

    @property
    def is_rejected(self) -> bool:
        return self.status is OutcomeStatus.REJECTED

    @property
    def is_unavailable(self) -> bool:
        return self.status is OutcomeStatus.UNAVAILABLE

    def to_alert(self) -> Alert:
        """Shortcut for [Alert.from_outcome()][grouphug.models.outcome.Alert.from_outcome]."""
        return Alert.from_outcome(self)


@dataclass(frozen=True, slots=True)
class Alert:
    """Status class and message text for one outcome.

    Examples:
        ```python
        Alert.from_outcome(SubmissionOutcome.rejected("Error: bad fee"))
        # Alert(css_class='alert-warning', message='Transaction rejected. Error: bad fee')
        ```
    """

    css_class: AlertClass
    message: str

    @classmethod
    def from_outcome(cls, outcome: SubmissionOutcome) -> Alert:
        if outcome.is_accepted:
            return cls(AlertClass.SUCCESS, ACCEPTED_MESSAGE)
        if outcome.is_unavailable:
            return cls(AlertClass.WARNING, UNAVAILABLE_MESSAGE)
        if outcome.invalid:
            return cls(AlertClass.DANGER, INVALID_MESSAGE)
        if not outcome.reason:
            return cls(AlertClass.WARNING, REJECTED_MESSAGE)
        return cls(AlertClass.WARNING, f"{REJECTED_MESSAGE} {outcome.reason}")
