"""
Point-to-point byte channel over TCP.

A Channel sends a message to a remote listener (client role, with a bounded
number of connection attempts) or listens once for a single inbound
connection and returns what it sent (server role). Sockets are opened and
closed within each call; nothing is kept between calls.
"""

import socket
from collections import deque
from typing import Any, Deque, Dict, List, Optional, Tuple, Union

import anyio
from anyio.abc import ByteReceiveStream, SocketAttribute

from netchannel.config import (
    DEFAULT_ATTEMPTS,
    DEFAULT_DELAY,
    DEFAULT_HISTORY_SIZE,
    DEFAULT_HOST,
    DEFAULT_PORT,
    MAX_BUFFER,
    get_env_config,
    is_valid_port,
    parse_bool,
)
from netchannel.errors import (
    AttemptsExhaustedError,
    ConfigurationError,
    ConnectError,
    ReadError,
    ReceiveTimeoutError,
    ResolutionError,
    TransportError,
    WriteError,
)
from netchannel.message import BytesLike, hexdump, to_bytes, to_text
from netchannel.outcome import Direction, HistoryEntry, ReceiveResult
from netchannel.telemetry import get_telemetry

# anyio reports broken or closed streams with its own exception types
_STREAM_ERRORS = (OSError, anyio.BrokenResourceError, anyio.ClosedResourceError)


class Channel:
    """
    Sends messages to, and receives one message from, a TCP peer.
    """

    def __init__(
        self,
        port: int = DEFAULT_PORT,
        *,
        config: Optional[Dict[str, Any]] = None,
        enable_telemetry: bool = True,
    ):
        """Initialize the channel.

        Args:
            port: The port to listen on when receiving. Values outside 1-65535
                are replaced by DEFAULT_PORT.
            config: Optional overrides for ``max_buffer``, ``single_read`` and
                ``history_size``.
            enable_telemetry: Whether to emit logs and spans.

        Raises:
            ConfigurationError: If ``max_buffer`` is not a positive integer or
                ``history_size`` is negative.
        """
        self._config = config or {}
        self._tracer, self._logger = (
            get_telemetry("netchannel.channel") if enable_telemetry else (None, None)
        )

        if is_valid_port(port):
            self._port = port
        else:
            if self._logger:
                self._logger.warning(
                    "channel.invalid_port",
                    port=port,
                    default=DEFAULT_PORT,
                    reason="Port must be in the range 1-65535",
                )
            self._port = DEFAULT_PORT

        self._max_buffer = self._parse_max_buffer(
            self._get_config("max_buffer", MAX_BUFFER)
        )
        self._single_read = parse_bool(self._get_config("single_read", False))
        self._history: Deque[HistoryEntry] = deque(
            maxlen=self._parse_history_size(
                self._get_config("history_size", DEFAULT_HISTORY_SIZE)
            )
        )

    @property
    def port(self) -> int:
        """The configured listening port."""
        return self._port

    @property
    def max_buffer(self) -> int:
        """The most bytes a single receive returns."""
        return self._max_buffer

    @property
    def single_read(self) -> bool:
        """Whether receive stops after one read instead of reading to end of stream."""
        return self._single_read

    @property
    def history(self) -> Tuple[HistoryEntry, ...]:
        """Messages sent and received by this channel, oldest first.

        Only the most recent ``history_size`` entries are kept.
        """
        return tuple(self._history)

    def clear_history(self) -> None:
        self._history.clear()

    def _get_config(self, key: str, default: Any = None) -> Any:
        """Get a configuration value from the hierarchy.

        Args:
            key: The configuration key
            default: The default value if not found

        Returns:
            The configuration value
        """
        if key in self._config:
            return self._config[key]

        env_value = get_env_config(key)
        if env_value is not None:
            return env_value

        return default

    @staticmethod
    def _parse_max_buffer(value: Any) -> int:
        try:
            size = int(value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid max_buffer: {value!r}") from e
        if size < 1:
            raise ConfigurationError(f"max_buffer must be positive, got {size}")
        return size

    @staticmethod
    def _parse_history_size(value: Any) -> int:
        try:
            size = int(value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid history_size: {value!r}") from e
        if size < 0:
            raise ConfigurationError(f"history_size must not be negative, got {size}")
        return size

    def resolve_port(self, port: int = 0) -> int:
        """Return ``port`` if it is a valid port, otherwise the channel's port."""
        return port if is_valid_port(port) else self._port

    # Client role

    async def send(
        self,
        message: Union[str, BytesLike],
        port: int,
        host: str = DEFAULT_HOST,
        attempts: int = DEFAULT_ATTEMPTS,
        delay: float = DEFAULT_DELAY,
    ) -> int:
        """Send a message to ``host:port``, retrying failed connections.

        Each attempt opens a new connection, writes the whole message and
        closes the connection. No acknowledgement is read back.

        Args:
            message: The bytes to send; text is converted one byte per character.
            port: The port the remote host listens on.
            host: The remote host name or address.
            attempts: The maximum number of attempts.
            delay: Seconds to wait between two attempts.

        Returns:
            The number of the attempt that succeeded, or 0 if the message was
            empty and nothing was sent.

        Raises:
            ConfigurationError: If port, attempts or delay are invalid.
            MessageError: If a text message holds a character above U+00FF.
            AttemptsExhaustedError: If every attempt failed.
        """
        data = to_bytes(message)
        if not data:
            return 0

        if not is_valid_port(port):
            raise ConfigurationError(f"Port must be in the range 1-65535, got {port!r}")
        if attempts < 1:
            raise ConfigurationError(f"attempts must be at least 1, got {attempts}")
        if delay < 0:
            raise ConfigurationError(f"delay must not be negative, got {delay}")

        if self._tracer:
            with self._tracer.start_as_current_span(
                "netchannel.send",
                {"net.peer.name": host, "net.peer.port": port, "send.attempts": attempts},
            ) as span:
                try:
                    attempt = await self._send_with_retry(data, port, host, attempts, delay)
                    span.set_attribute("send.successful_attempt", attempt)
                    return attempt
                except Exception as e:
                    span.record_exception(e)
                    raise
        return await self._send_with_retry(data, port, host, attempts, delay)

    async def send_text(
        self,
        message: str,
        port: int,
        host: str = DEFAULT_HOST,
        attempts: int = DEFAULT_ATTEMPTS,
        delay: float = DEFAULT_DELAY,
    ) -> int:
        """Send a text message, one byte per character."""
        return await self.send(to_bytes(message), port, host, attempts, delay)

    async def _send_with_retry(
        self, data: bytes, port: int, host: str, attempts: int, delay: float
    ) -> int:
        failures: List[TransportError] = []

        for attempt in range(1, attempts + 1):
            try:
                await self._send_once(data, port, host)
            except TransportError as e:
                failures.append(e)
                if self._logger:
                    self._logger.error(
                        "send.attempt_failed",
                        host=host,
                        port=port,
                        attempt=attempt,
                        attempts=attempts,
                        error=str(e),
                        error_type=type(e).__name__,
                    )
                if attempt < attempts:
                    await anyio.sleep(delay)
                continue

            if self._logger:
                self._logger.info(
                    "send.complete",
                    host=host,
                    port=port,
                    attempt=attempt,
                    size=len(data),
                )
            self._history.append(HistoryEntry(Direction.SENT, port, data))
            return attempt

        if self._logger:
            self._logger.critical(
                "send.exhausted", host=host, port=port, attempts=attempts
            )
        raise AttemptsExhaustedError(attempts, failures)

    async def _send_once(self, data: bytes, port: int, host: str) -> None:
        try:
            stream = await anyio.connect_tcp(host, port)
        except socket.gaierror as e:
            raise ResolutionError(f"Cannot resolve {host}: {e}") from e
        except OSError as e:
            raise ConnectError(f"Cannot connect to {host}:{port}: {e}") from e

        async with stream:
            try:
                await stream.send(data)
            except _STREAM_ERRORS as e:
                raise WriteError(f"Write to {host}:{port} failed: {e!r}") from e

    # Server role

    async def receive_result(
        self, port: int = 0, *, timeout: Optional[float] = None
    ) -> ReceiveResult:
        """Listen on a port, accept one connection and read what it sends.

        The listener is closed as soon as one connection has been accepted.
        Transport failures are reported in the result rather than raised.

        Unless ``single_read`` is set, the channel reads until the peer closes
        its side or ``max_buffer`` bytes have arrived. A peer that writes and
        then keeps the connection open waiting for a reply therefore blocks
        this call; use ``single_read`` or ``timeout`` with such peers.

        Args:
            port: The port to listen on; 0 or any invalid value selects the
                channel's port.
            timeout: Optional limit in seconds for accept and read together.

        Returns:
            The tagged outcome of the receive.

        Raises:
            ReceiveTimeoutError: If ``timeout`` expires first.
        """
        effective_port = self.resolve_port(port)

        if self._tracer:
            with self._tracer.start_as_current_span(
                "netchannel.receive", {"receive.port": effective_port}
            ) as span:
                try:
                    result = await self._receive_with_timeout(effective_port, timeout)
                except Exception as e:
                    span.record_exception(e)
                    raise
                span.set_attribute("receive.status", result.status.value)
                span.set_attribute("receive.size", len(result.data))
                return result
        return await self._receive_with_timeout(effective_port, timeout)

    async def receive(self, port: int = 0) -> bytes:
        """Receive one message; empty on clean disconnect or transport error."""
        result = await self.receive_result(port)
        return result.data

    async def receive_text(self, port: int = 0) -> str:
        """Receive one message as text, one character per byte."""
        return to_text(await self.receive(port))

    async def _receive_with_timeout(
        self, port: int, timeout: Optional[float]
    ) -> ReceiveResult:
        if timeout is None:
            return await self._receive_once(port)

        with anyio.move_on_after(timeout):
            return await self._receive_once(port)

        if self._logger:
            self._logger.error("receive.timeout", port=port, timeout=timeout)
        raise ReceiveTimeoutError(
            f"No message received on port {port} within {timeout} seconds"
        )

    async def _receive_once(self, port: int) -> ReceiveResult:
        try:
            listener = await anyio.create_tcp_listener(
                local_host="0.0.0.0", local_port=port, family=socket.AF_INET
            )
        except OSError as e:
            return self._receive_failed(
                port, ConnectError(f"Cannot listen on port {port}: {e}"), e
            )

        async with listener:
            if self._logger:
                self._logger.info("receive.listening", port=port)
            try:
                stream = await listener.listeners[0].accept()
            except _STREAM_ERRORS as e:
                return self._receive_failed(
                    port, ConnectError(f"Accept on port {port} failed: {e!r}"), e
                )

        async with stream:
            if self._logger:
                self._logger.info(
                    "receive.accepted",
                    port=port,
                    peer=str(stream.extra(SocketAttribute.remote_address)),
                )
            try:
                data, interruption = await self._read(stream)
            except _STREAM_ERRORS as e:
                return self._receive_failed(
                    port, ReadError(f"Read on port {port} failed: {e!r}"), e
                )

        if not data:
            if self._logger:
                self._logger.info("receive.clean_disconnect", port=port)
            return ReceiveResult.disconnected(port)

        error = None
        if interruption is not None:
            error = ReadError(
                f"Read on port {port} interrupted after {len(data)} bytes: {interruption!r}"
            )
            error.__cause__ = interruption
            if self._logger:
                self._logger.warning(
                    "receive.interrupted",
                    port=port,
                    size=len(data),
                    error=str(error),
                    error_type=type(interruption).__name__,
                )

        if self._logger:
            self._logger.info(
                "receive.complete",
                port=port,
                size=len(data),
                at_capacity=len(data) >= self._max_buffer,
            )
            self._logger.debug("receive.payload", port=port, head=hexdump(data))
        self._history.append(HistoryEntry(Direction.RECEIVED, port, data))
        return ReceiveResult.received(port, data, self._max_buffer, error=error)

    async def _read(
        self, stream: ByteReceiveStream
    ) -> Tuple[bytes, Optional[BaseException]]:
        """Read up to max_buffer bytes, until end of stream or after one read.

        A stream error before any byte arrived propagates. Once bytes have
        been read, an error ends the read and is returned with them.
        """
        buffer = bytearray()
        while len(buffer) < self._max_buffer:
            try:
                chunk = await stream.receive(self._max_buffer - len(buffer))
            except anyio.EndOfStream:
                break
            except _STREAM_ERRORS as e:
                if not buffer:
                    raise
                return bytes(buffer), e
            buffer += chunk
            if self._single_read:
                break
        return bytes(buffer), None

    def _receive_failed(
        self, port: int, error: TransportError, cause: BaseException
    ) -> ReceiveResult:
        error.__cause__ = cause
        if self._logger:
            self._logger.error(
                "receive.error",
                port=port,
                error=str(error),
                error_type=type(cause).__name__,
            )
        return ReceiveResult.failed(port, error)
