"""
Tests for the blocking facade.
"""

import threading

import pytest

from netchannel import Channel, SyncChannel
from netchannel.errors import AttemptsExhaustedError, ReceiveTimeoutError


def test_wraps_channel():
    channel = Channel(4321, enable_telemetry=False)
    sync = SyncChannel(channel)
    assert sync.channel is channel
    assert sync.port == 4321


def test_default_channel():
    assert SyncChannel().port == 10000


def test_blocking_round_trip(free_port):
    """A receive in one thread gets what a send in another thread delivers."""
    receiver = SyncChannel(Channel(free_port, enable_telemetry=False))
    sender = SyncChannel(Channel(enable_telemetry=False))
    received = {}

    thread = threading.Thread(target=lambda: received.update(text=receiver.receive_text()))
    thread.start()
    sender.send("blocking hello", free_port, "127.0.0.1", attempts=100, delay=0.02)
    thread.join(timeout=10)

    assert not thread.is_alive()
    assert received["text"] == "blocking hello"


def test_blocking_send_exhaustion(free_port):
    sender = SyncChannel(Channel(enable_telemetry=False))
    with pytest.raises(AttemptsExhaustedError):
        sender.send(b"lost", free_port, "127.0.0.1", attempts=2, delay=0.01)


def test_blocking_receive_timeout(free_port):
    receiver = SyncChannel(Channel(free_port, enable_telemetry=False))
    with pytest.raises(ReceiveTimeoutError):
        receiver.receive_result(timeout=0.1)
