"""Tests for PriceHistory."""

import pytest

from signalengine.strategies.history import PriceHistory


class TestPriceHistory:
    """Tests for PriceHistory."""

    def test_append_and_get(self) -> None:
        """Prices are returned oldest first."""
        history = PriceHistory(capacity=10)

        history.append("WETH", 1.0)
        history.append("WETH", 2.0)
        history.append("WETH", 3.0)

        assert history.get("WETH") == [1.0, 2.0, 3.0]

    def test_unseen_token_is_empty(self) -> None:
        history = PriceHistory(capacity=10)

        assert history.get("WBTC") == []
        assert "WBTC" not in history

    def test_capacity_drops_oldest(self) -> None:
        """Appending past capacity truncates from the oldest end."""
        history = PriceHistory(capacity=3)

        for price in range(6):
            history.append("WETH", float(price))

        assert history.get("WETH") == [3.0, 4.0, 5.0]

    def test_tokens_are_independent(self) -> None:
        history = PriceHistory(capacity=5)

        history.append("WETH", 1.0)
        history.append("WBTC", 100.0)

        assert history.get("WETH") == [1.0]
        assert history.get("WBTC") == [100.0]
        assert sorted(history.tokens) == ["WBTC", "WETH"]
        assert len(history) == 2

    def test_get_returns_copy(self) -> None:
        history = PriceHistory(capacity=5)
        history.append("WETH", 1.0)

        snapshot = history.get("WETH")
        snapshot.append(99.0)

        assert history.get("WETH") == [1.0]

    def test_resize_shrink_keeps_newest(self) -> None:
        history = PriceHistory(capacity=6)
        for price in range(6):
            history.append("WETH", float(price))

        history.resize(2)

        assert history.capacity == 2
        assert history.get("WETH") == [4.0, 5.0]
        history.append("WETH", 6.0)
        assert history.get("WETH") == [5.0, 6.0]

    def test_resize_grow_keeps_all(self) -> None:
        history = PriceHistory(capacity=2)
        history.append("WETH", 1.0)
        history.append("WETH", 2.0)

        history.resize(4)
        history.append("WETH", 3.0)

        assert history.get("WETH") == [1.0, 2.0, 3.0]

    def test_clear(self) -> None:
        history = PriceHistory(capacity=5)
        history.append("WETH", 1.0)

        history.clear()

        assert len(history) == 0
        assert history.get("WETH") == []

    @pytest.mark.parametrize("capacity", [0, -1])
    def test_invalid_capacity(self, capacity: int) -> None:
        with pytest.raises(ValueError, match="capacity"):
            PriceHistory(capacity=capacity)
