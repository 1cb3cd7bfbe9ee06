"""GroupHug exception hierarchy.

Typed exceptions for every failure a submission can hit. Each one is
scoped to a single submission and recovered by
[GroupHugClient][grouphug.core.client.GroupHugClient] into a
[SubmissionOutcome][grouphug.models.outcome.SubmissionOutcome]; none is
fatal to the process. ``asyncio.CancelledError`` is never part of this
tree and always propagates untouched.

This module has no imports so that every layer (``models``, ``utils``,
``core``) can raise from it without breaking the layering.

Exception hierarchy:

```text
GroupHugError (base -- never raised directly)
├── ConfigurationError      -- bad YAML, bad config values, bad address
├── InvalidPayload          -- payload is not bounded, even-length hex
└── ServiceUnavailable      -- connect/write failure, reset, timeout
    └── BackendTimeoutError -- a bounded network step ran out of time
```
"""

from __future__ import annotations


class GroupHugError(Exception):
    """Base exception for all GroupHug client errors.

    Never raised directly; always use a specific subclass.
    """


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ConfigurationError(GroupHugError):
    """Invalid or missing configuration (YAML file, field values, CLI flags).

    See Also:
        [GroupHugClient.from_yaml()][grouphug.core.client.GroupHugClient.from_yaml]:
            Wraps file, YAML and validation failures in this exception.
    """


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class InvalidPayload(GroupHugError, ValueError):
    """Transaction payload failed validation before any network I/O.

    Raised for empty, odd-length, non-hex or over-length payloads. Always
    surfaced to the user as a rejection, never as a service error.

    Also a ``ValueError`` so callers that treat malformed input generically
    keep working.
    """


# ---------------------------------------------------------------------------
# Connectivity
# ---------------------------------------------------------------------------


class ServiceUnavailable(GroupHugError):
    """The backend relay could not complete the exchange.

    Covers refused connections, DNS failures, broken pipes and resets.
    The user may retry with a fresh submission; the client never retries
    on its own.
    """


class BackendTimeoutError(ServiceUnavailable):
    """A connect, read, write or close step exceeded its configured timeout."""
