"""Bounded text accumulator for subprocess output streams."""

from __future__ import annotations

MAX_OUTPUT_CHARS = 500_000


class OutputAccumulator:
    """Accumulates text chunks up to a fixed character budget.

    One accumulator is created per stream per invocation.  Once the budget
    is exceeded the stored text is cut to exactly ``max_chars`` characters
    and ``truncated`` stays True for the lifetime of the accumulator.
    """

    def __init__(self, max_chars: int = MAX_OUTPUT_CHARS) -> None:
        self._max_chars = max_chars
        self._text = ""
        self._truncated = False

    def append(self, chunk: str) -> None:
        """Append a chunk, cutting the buffer back to the budget if needed."""
        if not chunk or self._truncated:
            return
        combined = self._text + chunk
        if len(combined) > self._max_chars:
            self._text = combined[: self._max_chars]
            self._truncated = True
        else:
            self._text = combined

    @property
    def text(self) -> str:
        return self._text

    @property
    def truncated(self) -> bool:
        return self._truncated

    @property
    def max_chars(self) -> int:
        return self._max_chars

    def __len__(self) -> int:
        return len(self._text)
