"""Tests for identifier factories."""

from trade_analytics.core.ids import content_hash, new_id


class TestIds:
    def test_new_id_unique(self):
        assert new_id() != new_id()

    def test_content_hash_deterministic(self):
        assert content_hash("pf", "AAPL", "fill-1") == content_hash("pf", "AAPL", "fill-1")
        assert len(content_hash("pf")) == 32

    def test_content_hash_depends_on_every_part(self):
        base = content_hash("pf", "AAPL", "fill-1")
        assert content_hash("pf", "MSFT", "fill-1") != base
        assert content_hash("pf", "AAPL", "fill-2") != base

    def test_length(self):
        assert len(content_hash("x", length=12)) == 12
