"""
Error hierarchy for netchannel.

All errors raised by the package derive from ChannelError. Transport failures
coming from anyio or the operating system are wrapped in a TransportError
subclass, with the original exception chained as ``__cause__``.
"""

from typing import List, Optional


class ChannelError(Exception):
    """Base class for all netchannel errors."""

    pass


class ConfigurationError(ChannelError):
    """Error raised for invalid channel or call configuration."""

    pass


class MessageError(ChannelError):
    """Error raised when a message cannot be converted to or from bytes."""

    pass


class ReceiveTimeoutError(ChannelError):
    """Error raised when a receive does not complete within its timeout."""

    pass


class TransportError(ChannelError):
    """Base class for transport-level failures."""

    pass


class ResolutionError(TransportError):
    """Error raised when the remote host name cannot be resolved."""

    pass


class ConnectError(TransportError):
    """Error raised when a connection cannot be established."""

    pass


class WriteError(TransportError):
    """Error raised when writing to an established connection fails."""

    pass


class ReadError(TransportError):
    """Error raised when reading from an accepted connection fails."""

    pass


class AttemptsExhaustedError(TransportError):
    """Error raised when every send attempt has failed.

    Attributes:
        attempts: The attempt budget that was used up.
        failures: The error of each attempt, in order.
    """

    def __init__(
        self,
        attempts: int,
        failures: Optional[List[TransportError]] = None,
        message: Optional[str] = None,
    ):
        self.attempts = attempts
        self.failures = list(failures or [])
        if message is None:
            message = f"Maximum attempts reached ({attempts})"
            if self.failures:
                message += f": {self.failures[-1]}"
        super().__init__(message)

    @property
    def last_error(self) -> Optional[TransportError]:
        """The error of the final attempt, if any attempt was made."""
        return self.failures[-1] if self.failures else None
