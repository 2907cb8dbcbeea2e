"""
Byte-sequence helpers.

Text is mapped to bytes one byte per character (Latin-1), so every byte value
round-trips through ``str`` unchanged. This is not a Unicode text codec.
"""

from typing import TextIO, Union

from netchannel.errors import MessageError

BytesLike = Union[bytes, bytearray, memoryview]

TEXT_ENCODING = "latin-1"


def to_bytes(message: Union[str, BytesLike]) -> bytes:
    """Convert a message to bytes.

    Args:
        message: Raw bytes, or text whose characters are all below U+0100.

    Returns:
        The message as an immutable bytes object.

    Raises:
        MessageError: If the text holds a character that does not fit in one byte,
            or the message is of an unsupported type.
    """
    if isinstance(message, str):
        try:
            return message.encode(TEXT_ENCODING)
        except UnicodeEncodeError as e:
            raise MessageError(
                f"Character {message[e.start]!r} at position {e.start} does not fit in one byte"
            ) from e
    if isinstance(message, (bytes, bytearray, memoryview)):
        return bytes(message)
    raise MessageError(f"Unsupported message type: {type(message).__name__}")


def to_text(data: BytesLike) -> str:
    """Decode bytes to text, one character per byte."""
    return bytes(data).decode(TEXT_ENCODING)


def render(data: BytesLike, stream: TextIO) -> None:
    """Write each byte of ``data`` to ``stream`` as its character, in order."""
    for value in bytes(data):
        stream.write(chr(value))


def hexdump(data: BytesLike, limit: int = 32) -> str:
    """Return a space separated hex rendering of at most ``limit`` bytes."""
    view = bytes(data)
    text = view[:limit].hex(" ")
    if len(view) > limit:
        text += f" ... (+{len(view) - limit} bytes)"
    return text
