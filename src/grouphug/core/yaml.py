"""YAML configuration loading.

Loads client configuration files with ``yaml.safe_load`` so that only
plain YAML types are ever constructed. Used by
[GroupHugClient.from_yaml()][grouphug.core.client.GroupHugClient.from_yaml]
and the CLI.

Examples:
    ```yaml
    # grouphug.yaml
    address: tcp://127.0.0.1:8787
    expect_greeting: true
    timeouts:
      connect: 5.0
      read: 10.0
    limits:
      max_payload_length: 102400
    ```
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml


def load_yaml(config_path: str | Path) -> dict[str, Any]:
    """Load and parse a YAML configuration file.

    Args:
        config_path: Path to the YAML file (absolute or relative).

    Returns:
        Parsed configuration mapping. Returns an empty dict if the file
        exists but contains no data.

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If the file contains invalid YAML syntax.
        TypeError: If the top-level document is not a mapping.

    Warning:
        The returned dictionary is not validated. Pass it to
        [GroupHugClientConfig][grouphug.core.client.GroupHugClientConfig].
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise TypeError(f"Config file must contain a mapping, got {type(data).__name__}")
    return data
