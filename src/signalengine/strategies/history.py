"""Per-token bounded price history."""

from __future__ import annotations

from collections import deque


class PriceHistory:
    """
    Per-token ring buffers of observed prices.

    Each token gets its own deque bounded by `capacity`; appending past the
    bound drops the oldest price. Insertion order is chronological and
    entries are never reordered.

    One instance is owned by exactly one strategy, so two strategies tracking
    the same token keep independent histories.

    Attributes:
        capacity: Maximum number of prices kept per token.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._capacity = capacity
        self._data: dict[str, deque[float]] = {}

    @property
    def capacity(self) -> int:
        """Maximum number of prices kept per token."""
        return self._capacity

    @property
    def tokens(self) -> list[str]:
        """Tokens with at least one observed price."""
        return list(self._data.keys())

    def append(self, token: str, price: float) -> deque[float]:
        """
        Record a price for a token.

        Args:
            token: Token symbol.
            price: Observed price.

        Returns:
            The token's buffer after the append (oldest first).
        """
        buf = self._data.get(token)
        if buf is None:
            buf = deque(maxlen=self._capacity)
            self._data[token] = buf
        buf.append(price)
        return buf

    def get(self, token: str) -> list[float]:
        """Copy of the token's prices, oldest first (empty if unseen)."""
        buf = self._data.get(token)
        if buf is None:
            return []
        return list(buf)

    def resize(self, capacity: int) -> None:
        """Change the per-token bound, keeping the newest prices."""
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        if capacity == self._capacity:
            return
        self._capacity = capacity
        for token, buf in self._data.items():
            self._data[token] = deque(buf, maxlen=capacity)

    def clear(self) -> None:
        """Drop all history."""
        self._data.clear()

    def __len__(self) -> int:
        """Number of tracked tokens."""
        return len(self._data)

    def __contains__(self, token: object) -> bool:
        return token in self._data
