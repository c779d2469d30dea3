"""Unit tests for reconciliation against the source roster."""

import logging

from recipe_mix.models import AllocationSet, Source
from recipe_mix.reconcile import classify, drop, reconcile, substitute, substitution_candidates


class TestClassify:
    def test_absent_and_unusable_are_missing(self, sample_sources):
        allocation = AllocationSet.of(("A", 40), ("X", 20), ("D", 30), ("B", 10))
        result = classify(allocation, sample_sources)
        assert result.valid.source_ids == ["A", "B"]
        assert result.missing_ids == ["X", "D"]

    def test_all_valid(self, three_way_mix, sample_sources):
        result = classify(three_way_mix, sample_sources)
        assert result.valid == three_way_mix
        assert result.missing.is_empty

    def test_empty_roster(self, three_way_mix):
        assert classify(three_way_mix, []).missing_ids == ["A", "B", "C"]


class TestSubstitute:
    def test_merge_into_existing(self, sample_sources):
        allocation = AllocationSet.of(("X", 20), ("B", 80))
        assert substitute(allocation, "X", "B", sample_sources).as_dict() == {"B": 100}

    def test_merge_preserves_order(self, sample_sources):
        allocation = AllocationSet.of(("A", 30), ("X", 20), ("C", 50))
        result = substitute(allocation, "X", "A", sample_sources)
        assert result.source_ids == ["A", "C"]
        assert result.as_dict() == {"A": 50, "C": 50}

    def test_replace_in_place(self, sample_sources):
        allocation = AllocationSet.of(("A", 30), ("X", 20), ("C", 50))
        result = substitute(allocation, "X", "B", sample_sources)
        assert result.source_ids == ["A", "B", "C"]
        assert result.as_dict() == {"A": 30, "B": 20, "C": 50}

    def test_unknown_missing_id_is_noop(self, three_way_mix, sample_sources):
        assert substitute(three_way_mix, "X", "A", sample_sources) is three_way_mix

    def test_same_id_is_noop(self, three_way_mix, sample_sources):
        assert substitute(three_way_mix, "A", "A", sample_sources) is three_way_mix

    def test_unusable_replacement_refused(self, sample_sources, caplog):
        allocation = AllocationSet.of(("X", 20), ("B", 80))
        with caplog.at_level(logging.WARNING, logger="recipe_mix.reconcile"):
            result = substitute(allocation, "X", "D", sources=sample_sources)
        assert result is allocation
        assert "unusable" in caplog.text

    def test_replacement_outside_roster_refused(self, sample_sources):
        allocation = AllocationSet.of(("X", 20), ("B", 80))
        assert substitute(allocation, "X", "Z", sample_sources) is allocation

    def test_empty_roster_refuses_everything(self):
        allocation = AllocationSet.of(("X", 20), ("B", 80))
        assert substitute(allocation, "X", "B", []) is allocation

    def test_usable_replacement_with_roster(self, sample_sources):
        allocation = AllocationSet.of(("X", 20), ("B", 80))
        assert substitute(allocation, "X", "C", sources=sample_sources).as_dict() == {"C": 20, "B": 80}


class TestDrop:
    def test_redistributes_proportionally(self):
        allocation = AllocationSet.of(("A", 50), ("X", 30), ("C", 20))
        assert drop(allocation, "X").as_dict() == {"A": 71, "C": 29}

    def test_last_entry(self):
        assert drop(AllocationSet.of(("X", 100)), "X").is_empty


class TestReconcile:
    def test_no_missing_returns_identical_set(self, three_way_mix, sample_sources):
        assert reconcile(three_way_mix, sample_sources) is three_way_mix

    def test_drops_all_missing(self, sample_sources):
        allocation = AllocationSet.of(("A", 40), ("X", 20), ("D", 20), ("B", 20))
        result = reconcile(allocation, sample_sources)
        assert result.source_ids == ["A", "B"]
        assert result.total == 100

    def test_idempotent(self, sample_sources):
        allocation = AllocationSet.of(("A", 40), ("X", 60))
        once = reconcile(allocation, sample_sources)
        assert reconcile(once, sample_sources) is once


class TestSubstitutionCandidates:
    def test_only_usable_in_roster_order(self, sample_sources):
        assert [s.id for s in substitution_candidates(sample_sources)] == ["A", "B", "C"]

    def test_empty_roster(self):
        assert substitution_candidates([Source("D", usable=False)]) == []
