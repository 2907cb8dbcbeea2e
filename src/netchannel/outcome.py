"""Tagged outcome of a single receive, and the channel's message record."""

import enum
from dataclasses import dataclass, field
from typing import NamedTuple, Optional


class ReceiveStatus(str, enum.Enum):
    OK = "ok"
    CLEAN_DISCONNECT = "clean_disconnect"
    TRANSPORT_ERROR = "transport_error"


@dataclass(frozen=True)
class ReceiveResult:
    """What one accepted connection produced.

    ``data`` is empty for CLEAN_DISCONNECT and TRANSPORT_ERROR. ``error`` is
    always set for TRANSPORT_ERROR. An OK result carries an ``error`` too
    when the connection broke after some bytes had already arrived; ``data``
    then holds those bytes.
    """

    status: ReceiveStatus
    port: int
    data: bytes = b""
    error: Optional[Exception] = None
    capacity: int = field(default=0, repr=False)

    @property
    def ok(self) -> bool:
        return self.status is ReceiveStatus.OK

    @property
    def at_capacity(self) -> bool:
        """True when the read filled the buffer; the peer may have sent more."""
        return self.capacity > 0 and len(self.data) >= self.capacity

    @property
    def interrupted(self) -> bool:
        """True when data arrived but the connection broke before end of stream."""
        return self.ok and self.error is not None

    @classmethod
    def received(
        cls, port: int, data: bytes, capacity: int, error: Optional[Exception] = None
    ) -> "ReceiveResult":
        return cls(ReceiveStatus.OK, port, data, error=error, capacity=capacity)

    @classmethod
    def disconnected(cls, port: int) -> "ReceiveResult":
        return cls(ReceiveStatus.CLEAN_DISCONNECT, port)

    @classmethod
    def failed(cls, port: int, error: Exception) -> "ReceiveResult":
        return cls(ReceiveStatus.TRANSPORT_ERROR, port, error=error)


class Direction(str, enum.Enum):
    SENT = "sent"
    RECEIVED = "received"


class HistoryEntry(NamedTuple):
    """One message a channel delivered or received."""

    direction: Direction
    port: int
    data: bytes
