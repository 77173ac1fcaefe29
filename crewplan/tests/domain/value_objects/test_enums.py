"""Tests for domain enums."""

import pytest

from crewplan.domain.scheduling.value_objects.enums import (
    BaseCategory,
    ConflictSeverity,
    Division,
    ImpactLevel,
    PhaseStatus,
    ProjectStatus,
    Segment,
)


class TestDivision:
    def test_base_category_and_segment(self):
        assert Division.PLUMBING_COMMERCIAL.base_category == BaseCategory.PLUMBING
        assert Division.PLUMBING_COMMERCIAL.segment == Segment.COMMERCIAL
        assert Division.HVAC_MULTIFAMILY.base_category == BaseCategory.HVAC
        assert Division.HVAC_MULTIFAMILY.segment == Segment.MULTIFAMILY

    @pytest.mark.parametrize(
        "left,right,compatible",
        [
            (Division.PLUMBING_COMMERCIAL, Division.PLUMBING_CUSTOM, True),
            (Division.PLUMBING_MULTIFAMILY, Division.PLUMBING_MULTIFAMILY, True),
            (Division.HVAC_CUSTOM, Division.HVAC_COMMERCIAL, True),
            (Division.PLUMBING_MULTIFAMILY, Division.HVAC_MULTIFAMILY, False),
            (Division.HVAC_CUSTOM, Division.PLUMBING_CUSTOM, False),
        ],
    )
    def test_compatibility_follows_base_category(self, left, right, compatible):
        assert left.is_compatible_with(right) is compatible
        assert right.is_compatible_with(left) is compatible


def test_severity_blocking():
    assert ConflictSeverity.CRITICAL.is_blocking
    assert ConflictSeverity.HIGH.is_blocking
    assert not ConflictSeverity.MEDIUM.is_blocking
    assert not ConflictSeverity.LOW.is_blocking


def test_impact_rank_orders_low_first():
    ranked = sorted(ImpactLevel, key=lambda level: level.rank)
    assert ranked == [ImpactLevel.LOW, ImpactLevel.MEDIUM, ImpactLevel.HIGH]


def test_phase_status_activity():
    assert PhaseStatus.IN_PROGRESS.is_active
    assert PhaseStatus.DELAYED.is_active
    assert not PhaseStatus.COMPLETED.is_active
    assert not PhaseStatus.BLOCKED.is_active
    assert PhaseStatus.COMPLETED.is_terminal


def test_project_status_activity():
    assert ProjectStatus.ACTIVE.is_active
    assert ProjectStatus.PLANNED.is_active
    assert not ProjectStatus.CANCELLED.is_active
    assert not ProjectStatus.COMPLETED.is_active
