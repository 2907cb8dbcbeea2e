"""
netchannel: a one-shot TCP byte channel.

A Channel sends raw bytes to a remote listener with a bounded number of
connection attempts, or listens once for a single connection and returns
the bytes it delivered.
"""

from netchannel.channel import Channel
from netchannel.errors import (
    AttemptsExhaustedError,
    ChannelError,
    ConfigurationError,
    ConnectError,
    MessageError,
    ReadError,
    ReceiveTimeoutError,
    ResolutionError,
    TransportError,
    WriteError,
)
from netchannel.outcome import Direction, HistoryEntry, ReceiveResult, ReceiveStatus
from netchannel.sync import SyncChannel

__version__ = "0.1.0"

__all__ = [
    "Channel",
    "SyncChannel",
    "ReceiveResult",
    "ReceiveStatus",
    "Direction",
    "HistoryEntry",
    "ChannelError",
    "ConfigurationError",
    "MessageError",
    "ReceiveTimeoutError",
    "TransportError",
    "ResolutionError",
    "ConnectError",
    "WriteError",
    "ReadError",
    "AttemptsExhaustedError",
]
