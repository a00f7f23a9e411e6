"""Protocol definitions for render sinks."""

from typing import Protocol


class TextSink(Protocol):
    """Anything a rendered view can be written to as text.

    ``io.StringIO`` and files opened in text mode satisfy this protocol.
    """

    def write(self, data: str) -> int:
        """Write rendered text.

        Args:
            data: Rendered chunk

        Returns:
            Number of characters written
        """
        ...


class BinarySink(Protocol):
    """Anything a rendered view can be written to as bytes."""

    def write(self, data: bytes) -> int:
        """Write rendered bytes."""
        ...
