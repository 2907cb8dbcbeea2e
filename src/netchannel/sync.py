"""
Blocking facade over Channel.

Each call runs the corresponding coroutine to completion on a fresh event
loop with ``anyio.run``, so it must not be used from inside a running loop.
"""

from functools import partial
from typing import Optional, Tuple, Union

import anyio

from netchannel.channel import Channel
from netchannel.config import DEFAULT_ATTEMPTS, DEFAULT_DELAY, DEFAULT_HOST
from netchannel.message import BytesLike
from netchannel.outcome import HistoryEntry, ReceiveResult


class SyncChannel:
    """Blocking wrapper that delegates every call to an async Channel."""

    def __init__(self, channel: Optional[Channel] = None, backend: str = "asyncio"):
        self.channel = channel or Channel()
        self.backend = backend

    @property
    def port(self) -> int:
        return self.channel.port

    @property
    def history(self) -> Tuple[HistoryEntry, ...]:
        return self.channel.history

    def _run(self, func, *args, **kwargs):
        return anyio.run(partial(func, *args, **kwargs), backend=self.backend)

    def send(
        self,
        message: Union[str, BytesLike],
        port: int,
        host: str = DEFAULT_HOST,
        attempts: int = DEFAULT_ATTEMPTS,
        delay: float = DEFAULT_DELAY,
    ) -> int:
        return self._run(self.channel.send, message, port, host, attempts, delay)

    def receive_result(self, port: int = 0, *, timeout: Optional[float] = None) -> ReceiveResult:
        return self._run(self.channel.receive_result, port, timeout=timeout)

    def receive(self, port: int = 0) -> bytes:
        return self._run(self.channel.receive, port)

    def receive_text(self, port: int = 0) -> str:
        return self._run(self.channel.receive_text, port)
