"""Core layer: the client, its connection, configuration and observability.

Depends on [grouphug.models][grouphug.models] and
[grouphug.utils][grouphug.utils]; depended upon only by the CLI.

Attributes:
    GroupHugClient: One request/reply exchange per submission, with every
        failure recovered into a ``SubmissionOutcome``.
        See [GroupHugClient][grouphug.core.client.GroupHugClient].
    GroupHugClientConfig: Pydantic configuration (address, greeting
        expectation, timeouts, limits).
    BackendConnection: Single-use, timeout-bounded TCP session.
        See [BackendConnection][grouphug.core.connection.BackendConnection].
    Logger: Structured logger supporting key=value and JSON output modes.
        See [Logger][grouphug.core.logger.Logger].
    YAML: Safe YAML loading with ``yaml.safe_load()``.
        See [load_yaml()][grouphug.core.yaml.load_yaml].

Examples:
    ```python
    from grouphug.core import GroupHugClient

    client = GroupHugClient.from_dict({"address": "tcp://127.0.0.1:8787"})
    outcome = await client.submit_payload("0200...")
    ```
"""

from .client import (
    GroupHugClient,
    GroupHugClientConfig,
    GroupHugLimitsConfig,
    GroupHugTimeoutsConfig,
)
from .connection import BackendConnection
from .logger import Logger, StructuredFormatter, format_kv_pairs
from .metrics import (
    CONNECTIONS_CLOSED,
    CONNECTIONS_OPENED,
    SUBMISSION_DURATION_SECONDS,
    SUBMISSIONS_TOTAL,
)
from .yaml import load_yaml


__all__ = [
    "CONNECTIONS_CLOSED",
    "CONNECTIONS_OPENED",
    "SUBMISSIONS_TOTAL",
    "SUBMISSION_DURATION_SECONDS",
    "BackendConnection",
    "GroupHugClient",
    "GroupHugClientConfig",
    "GroupHugLimitsConfig",
    "GroupHugTimeoutsConfig",
    "Logger",
    "StructuredFormatter",
    "format_kv_pairs",
    "load_yaml",
]
