"""Unit tests for the commit gate."""

import logging

import pytest

from recipe_mix.models import AllocationSet
from recipe_mix.validate import EMPTY_MIX, MISSING_SOURCES, SHARE_BELOW_MINIMUM, SUM_MISMATCH, can_commit


class TestCanCommit:
    def test_valid_mix(self, three_way_mix, sample_sources):
        verdict = can_commit(three_way_mix, sample_sources)
        assert verdict.ok
        assert verdict.reason is None
        assert verdict.total == 100
        assert bool(verdict)

    def test_empty_rejected(self, sample_sources):
        verdict = can_commit(AllocationSet(), sample_sources)
        assert not verdict
        assert verdict.reason == EMPTY_MIX

    @pytest.mark.parametrize("pairs", [(("A", 99.8),), (("A", 50), ("B", 50.2)), (("A", 30), ("B", 30), ("C", 30))])
    def test_sum_mismatch_rejected(self, pairs, sample_sources):
        verdict = can_commit(AllocationSet.of(*pairs), sample_sources)
        assert verdict.reason == SUM_MISMATCH
        assert verdict.total == pytest.approx(sum(p for _, p in pairs))

    def test_legacy_fraction_within_tolerance(self, sample_sources):
        allocation = AllocationSet.of(("A", 33.33), ("B", 33.33), ("C", 33.33))
        assert can_commit(allocation, sample_sources).ok

    def test_custom_tolerance(self, sample_sources):
        allocation = AllocationSet.of(("A", 99))
        assert can_commit(allocation, sample_sources, tolerance=1.0).ok

    def test_missing_sources(self, sample_sources):
        allocation = AllocationSet.of(("A", 40), ("X", 30), ("D", 30))
        verdict = can_commit(allocation, sample_sources)
        assert verdict.reason == MISSING_SOURCES
        assert verdict.missing == ("X", "D")

    def test_empty_roster_reports_every_source(self, three_way_mix):
        verdict = can_commit(three_way_mix, [])
        assert verdict.reason == MISSING_SOURCES
        assert verdict.missing == ("A", "B", "C")

    def test_roster_required(self):
        with pytest.raises(TypeError):
            can_commit(AllocationSet.of(("X", 100)))

    def test_sum_checked_before_sources(self, sample_sources):
        verdict = can_commit(AllocationSet.of(("X", 50)), sample_sources)
        assert verdict.reason == SUM_MISMATCH

    def test_mismatch_logs_warning(self, caplog, sample_sources):
        with caplog.at_level(logging.WARNING, logger="recipe_mix.validate"):
            can_commit(AllocationSet.of(("A", 80)), sample_sources)
        assert "deviates" in caplog.text


class TestMinimumShare:
    def test_fractional_share_rejected(self, sample_sources, caplog):
        allocation = AllocationSet.from_ingredients(
            [{"tank_uid": "A", "percentage": 0.4}, {"tank_uid": "B", "percentage": 99.6}]
        )
        with caplog.at_level(logging.WARNING, logger="recipe_mix.validate"):
            verdict = can_commit(allocation, sample_sources)
        assert not verdict
        assert verdict.reason == SHARE_BELOW_MINIMUM
        assert verdict.undersized == ("A",)
        assert "below 1%" in caplog.text

    def test_one_percent_accepted(self, sample_sources):
        assert can_commit(AllocationSet.of(("A", 1), ("B", 99)), sample_sources).ok

    def test_checked_before_sources(self, sample_sources):
        verdict = can_commit(AllocationSet.of(("X", 0.5), ("A", 99.5)), sample_sources)
        assert verdict.reason == SHARE_BELOW_MINIMUM
        assert verdict.missing == ()

    def test_sum_checked_first(self, sample_sources):
        verdict = can_commit(AllocationSet.of(("A", 0.5), ("B", 50)), sample_sources)
        assert verdict.reason == SUM_MISMATCH
