"""
GroupHug client protocol adapter.

[GroupHugClient][grouphug.core.client.GroupHugClient] performs exactly one
request/reply exchange with the backend relay per submission:

1. connect (bounded by ``timeouts.connect``),
2. read the greeting line when ``expect_greeting`` is set,
3. write ``add_tx <hex>``,
4. read one reply line: ``Ok`` means accepted, anything else is a
   rejection reason,
5. close, on every exit path.

Protocol choices:

* **Confirmed replies.** The client always waits for the reply line. A
  read timeout or reset is ``unavailable``; a peer that closes without a
  single byte is ``rejected("")``, because it accepted the write and then
  declined to confirm.
* **Lenient greeting.** A greeting that times out or hits EOF is treated as
  "no greeting"; the exchange continues and ``chain`` stays ``None``. A
  greeting that fills ``max_greeting_length`` is kept truncated and the rest
  of its line (up to ``MAX_LINE_LENGTH`` bytes) is discarded, so its tail is
  never read back as the reply.
* **No retries, no pooling.** Each submission opens a fresh
  [BackendConnection][grouphug.core.connection.BackendConnection].

All errors are recovered here and returned as a
[SubmissionOutcome][grouphug.models.outcome.SubmissionOutcome]. The client
holds no mutable state, so one instance can serve concurrent tasks.

Examples:
    ```python
    client = GroupHugClient.from_yaml("grouphug.yaml")
    outcome = await client.submit_payload(form["tx"])
    alert = outcome.to_alert()
    ```
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from grouphug.exceptions import (
    BackendTimeoutError,
    ConfigurationError,
    InvalidPayload,
    ServiceUnavailable,
)
from grouphug.models.constants import (
    DEFAULT_MAX_GREETING_LENGTH,
    DEFAULT_MAX_PAYLOAD_LENGTH,
    DEFAULT_MAX_REPLY_LENGTH,
    MAX_LINE_LENGTH,
    OK_REPLY,
)
from grouphug.models.outcome import SubmissionOutcome
from grouphug.models.submission import TransactionSubmission
from grouphug.utils.address import RelayAddress, parse_address
from grouphug.utils.lines import decode_line

from .connection import BackendConnection
from .logger import Logger
from .metrics import SUBMISSION_DURATION_SECONDS, SUBMISSIONS_TOTAL
from .yaml import load_yaml


# ---------------------------------------------------------------------------
# Configuration Models
# ---------------------------------------------------------------------------


class GroupHugTimeoutsConfig(BaseModel):
    """Per-step network timeouts (in seconds).

    Every step of an exchange is bounded: the backend is an untrusted peer
    and a hung relay must become ``unavailable``, never a hung request.
    """

    connect: float = Field(default=5.0, gt=0.0, le=300.0, description="TCP connect timeout")
    read: float = Field(default=10.0, gt=0.0, le=300.0, description="Greeting/reply read timeout")
    write: float = Field(default=10.0, gt=0.0, le=300.0, description="Command write timeout")
    close: float = Field(default=2.0, gt=0.0, le=60.0, description="Graceful close timeout")


class GroupHugLimitsConfig(BaseModel):
    """Size bounds for the payload and for lines read from the backend.

    Note:
        ``max_payload_length`` counts hex characters, not decoded bytes.
        The default of 102400 matches the backend's 100 KiB receive
        buffer; deployments that only relay small transactions can lower
        it (1024 is a common choice).
    """

    max_payload_length: int = Field(
        default=DEFAULT_MAX_PAYLOAD_LENGTH, ge=2, description="Maximum hex characters per payload"
    )
    max_reply_length: int = Field(
        default=DEFAULT_MAX_REPLY_LENGTH,
        ge=len(OK_REPLY),
        le=MAX_LINE_LENGTH,
        description="Maximum bytes read for the reply line",
    )
    max_greeting_length: int = Field(
        default=DEFAULT_MAX_GREETING_LENGTH,
        ge=1,
        le=MAX_LINE_LENGTH,
        description="Maximum bytes read for the greeting line",
    )


class GroupHugClientConfig(BaseModel):
    """Aggregate configuration for [GroupHugClient][grouphug.core.client.GroupHugClient].

    The relay location may be given either as ``host``/``port`` or as an
    ``address`` string (``tcp://host:port``), never both.

    See Also:
        [GroupHugTimeoutsConfig][grouphug.core.client.GroupHugTimeoutsConfig]:
            Connect, read, write and close timeouts.
        [GroupHugLimitsConfig][grouphug.core.client.GroupHugLimitsConfig]:
            Payload and line length bounds.
    """

    host: str = Field(default="127.0.0.1", min_length=1, description="Relay hostname")
    port: int = Field(default=8787, ge=1, le=65535, description="Relay TCP port")
    expect_greeting: bool = Field(
        default=True, description="Read the chain identifier line after connecting"
    )
    timeouts: GroupHugTimeoutsConfig = Field(default_factory=GroupHugTimeoutsConfig)
    limits: GroupHugLimitsConfig = Field(default_factory=GroupHugLimitsConfig)

    @model_validator(mode="before")
    @classmethod
    def resolve_address(cls, data: Any) -> Any:
        """Expand an ``address`` string into ``host`` and ``port``."""
        if not isinstance(data, dict) or "address" not in data:
            return data
        if "host" in data or "port" in data:
            raise ValueError("address cannot be combined with host or port")
        data = dict(data)
        address = parse_address(str(data.pop("address")))
        data["host"] = address.host
        data["port"] = address.port
        return data

    @property
    def address(self) -> RelayAddress:
        """The relay location as a [RelayAddress][grouphug.utils.address.RelayAddress]."""
        return RelayAddress(self.host, self.port)


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class GroupHugClient:
    """Adapter between a frontend and the GroupHug backend relay.

    Examples:
        ```python
        client = GroupHugClient(GroupHugClientConfig(address="tcp://relay:8787"))
        outcome = await client.submit(validate_payload("0200..."))
        if outcome.is_accepted:
            ...
        ```

    See Also:
        [BackendConnection][grouphug.core.connection.BackendConnection]:
            The single-use session opened for every submission.
        [SubmissionOutcome][grouphug.models.outcome.SubmissionOutcome]:
            The value every call resolves to.
    """

    def __init__(self, config: GroupHugClientConfig | None = None) -> None:
        self._config = config or GroupHugClientConfig()
        self._logger = Logger("client")

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> GroupHugClient:
        """Create a client from a YAML configuration file.

        Raises:
            ConfigurationError: If the file is missing, is not valid YAML,
                or fails validation.
        """
        try:
            config_dict = load_yaml(config_path)
        except (OSError, TypeError, ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot load {config_path}: {e}") from e
        return cls.from_dict(config_dict)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> GroupHugClient:
        """Create a client from a configuration dictionary.

        Raises:
            ConfigurationError: If the dictionary fails validation.
        """
        try:
            config = GroupHugClientConfig(**config_dict)
        except (ValidationError, TypeError) as e:
            raise ConfigurationError(f"Invalid client configuration: {e}") from e
        return cls(config=config)

    @property
    def config(self) -> GroupHugClientConfig:
        """The client configuration (read-only)."""
        return self._config

    def _connection(self) -> BackendConnection:
        timeouts = self._config.timeouts
        return BackendConnection(
            self._config.host,
            self._config.port,
            connect_timeout=timeouts.connect,
            read_timeout=timeouts.read,
            write_timeout=timeouts.write,
            close_timeout=timeouts.close,
        )

    def validate(self, payload: Any) -> TransactionSubmission:
        """Validate *payload* against this client's configured length bound.

        Raises:
            InvalidPayload: If the payload fails validation.
        """
        return TransactionSubmission(payload, max_length=self._config.limits.max_payload_length)

    async def submit_payload(self, payload: Any) -> SubmissionOutcome:
        """Validate raw input, then submit it.

        Invalid input never reaches the network: it is returned as a
        rejection with ``invalid=True`` and the validation message as the
        reason.
        """
        try:
            submission = self.validate(payload)
        except InvalidPayload as e:
            self._logger.info("payload_invalid", error=str(e))
            SUBMISSIONS_TOTAL.labels(status="rejected").inc()
            return SubmissionOutcome.rejected(str(e), invalid=True)
        return await self.submit(submission)

    async def submit(self, submission: TransactionSubmission) -> SubmissionOutcome:
        """Relay one validated submission and interpret the reply.

        Args:
            submission: Already-validated payload; it is not re-checked.

        Returns:
            ``accepted`` on an ``Ok`` reply, ``rejected`` with the reply
            text otherwise, ``unavailable`` if the exchange failed.
        """
        start = time.monotonic()
        outcome = await self._exchange(submission)
        SUBMISSION_DURATION_SECONDS.observe(time.monotonic() - start)
        SUBMISSIONS_TOTAL.labels(status=outcome.status).inc()
        return outcome

    async def _exchange(self, submission: TransactionSubmission) -> SubmissionOutcome:
        chain: str | None = None
        host, port = self._config.host, self._config.port
        try:
            async with self._connection() as conn:
                if self._config.expect_greeting:
                    chain = await self._read_greeting(conn)
                await conn.send(submission.to_command())
                raw = await conn.read_line(self._config.limits.max_reply_length)
        except ServiceUnavailable as e:
            self._logger.warning("submission_unavailable", host=host, port=port, error=str(e))
            return SubmissionOutcome.unavailable(chain=chain)

        reply = decode_line(raw) if raw is not None else ""
        if reply == OK_REPLY:
            self._logger.info("submission_accepted", host=host, port=port, size=len(submission))
            return SubmissionOutcome.accepted(chain=chain)

        self._logger.info(
            "submission_rejected", host=host, port=port, reason=reply, closed=raw is None
        )
        return SubmissionOutcome.rejected(reply, chain=chain)

    async def _read_greeting(self, conn: BackendConnection) -> str | None:
        limit = self._config.limits.max_greeting_length
        try:
            raw = await conn.read_line(limit)
        except BackendTimeoutError:
            self._logger.debug("greeting_missing", reason="timeout")
            return None
        if raw is None:
            self._logger.debug("greeting_missing", reason="eof")
            return None

        if len(raw) == limit:
            # No newline within the cap: drop the rest of the line
            try:
                rest = await conn.read_line(MAX_LINE_LENGTH)
            except BackendTimeoutError:
                rest = None
            self._logger.debug("greeting_truncated", limit=limit, discarded=len(rest or b""))
        return decode_line(raw) or None

    async def fetch_chain(self) -> str | None:
        """Connect, read only the greeting line, and disconnect.

        No command is sent. The greeting is read leniently: a backend that
        stays silent or closes yields ``None``.

        Raises:
            ServiceUnavailable: If the connection cannot be established or
                is reset.
        """
        async with self._connection() as conn:
            return await self._read_greeting(conn)
