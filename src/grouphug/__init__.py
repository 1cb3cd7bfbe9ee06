r"""GroupHug -- frontend client for the GroupHug transaction relay.

Validates hex-encoded transactions and relays each one to a GroupHug
backend over its line-oriented TCP protocol (``add_tx <hex>`` answered by
``Ok`` or a rejection reason), returning an accepted / rejected /
unavailable outcome the web layer can display.

Imports flow strictly downward:

```text
                 cli           python -m grouphug
                  |
                core           Client, connection, config, logging, metrics
               /    \
           utils     |         Address parsing, bounded line reads
               \    /
               models          Pure frozen dataclasses (zero I/O)
```

Note:
    Top-level imports (``from grouphug import GroupHugClient``) use lazy
    loading and resolve on first access. For lightweight usage import
    directly from subpackages::

        from grouphug.models import validate_payload
        from grouphug.core import GroupHugClient
"""

import importlib
from importlib.metadata import version as _get_version


__version__ = _get_version("grouphug")

__all__ = [
    "Alert",
    "BackendConnection",
    "GroupHugClient",
    "GroupHugClientConfig",
    "GroupHugError",
    "InvalidPayload",
    "Logger",
    "OutcomeStatus",
    "ServiceUnavailable",
    "SubmissionOutcome",
    "TransactionSubmission",
    "validate_payload",
]

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    "Alert": ("grouphug.models", "Alert"),
    "OutcomeStatus": ("grouphug.models", "OutcomeStatus"),
    "SubmissionOutcome": ("grouphug.models", "SubmissionOutcome"),
    "TransactionSubmission": ("grouphug.models", "TransactionSubmission"),
    "validate_payload": ("grouphug.models", "validate_payload"),
    "BackendConnection": ("grouphug.core", "BackendConnection"),
    "GroupHugClient": ("grouphug.core", "GroupHugClient"),
    "GroupHugClientConfig": ("grouphug.core", "GroupHugClientConfig"),
    "Logger": ("grouphug.core", "Logger"),
    "GroupHugError": ("grouphug.exceptions", "GroupHugError"),
    "InvalidPayload": ("grouphug.exceptions", "InvalidPayload"),
    "ServiceUnavailable": ("grouphug.exceptions", "ServiceUnavailable"),
}


def __getattr__(name: str) -> object:
    if name in _LAZY_IMPORTS:
        module_path, attr_name = _LAZY_IMPORTS[name]
        module = importlib.import_module(module_path)
        value = getattr(module, attr_name)
        globals()[name] = value  # Cache for subsequent access
        return value
    raise AttributeError(f"module 'grouphug' has no attribute {name!r}")


def __dir__() -> list[str]:
    return __all__
