"""Tests for conflict and resolution value objects."""

import random
from datetime import date
from uuid import uuid4

from pydantic import TypeAdapter

from crewplan.domain.scheduling.services import rank_suggestions
from crewplan.domain.scheduling.value_objects.conflict import (
    Conflict,
    DoubleBookingDetails,
    HoursExceededDetails,
    OverCapacityDetails,
    OverlappingPhasesDetails,
    ValidationResult,
)
from crewplan.domain.scheduling.value_objects.enums import (
    ConflictSeverity,
    ConflictType,
    Division,
    EntityType,
    ImpactLevel,
    ResolutionAction,
    ResolutionType,
)
from crewplan.domain.scheduling.value_objects.resolution import (
    ApproveOvertime,
    ReassignEmployee,
    ResolutionSuggestion,
)


def double_booking(severity=ConflictSeverity.HIGH) -> Conflict:
    employee_id = uuid4()
    return Conflict(
        severity=severity,
        description="Employee double booked",
        entity_type=EntityType.EMPLOYEE,
        entity_id=employee_id,
        details=DoubleBookingDetails(
            employee_id=employee_id,
            day=date(2024, 3, 4),
            existing_hours=8,
            proposed_hours=9,
            total_hours=17,
            max_hours=16,
        ),
    )


class TestConflict:
    def test_type_follows_details(self):
        conflict = double_booking()
        assert conflict.type == ConflictType.DOUBLE_BOOKING
        assert conflict.is_blocking

    def test_json_restores_detail_variant(self):
        conflicts = [
            double_booking(),
            Conflict(
                severity=ConflictSeverity.HIGH,
                description="Division over capacity",
                entity_type=EntityType.DIVISION,
                entity_id=Division.HVAC_COMMERCIAL,
                details=OverCapacityDetails(
                    division=Division.HVAC_COMMERCIAL,
                    start_date=date(2024, 3, 4),
                    end_date=date(2024, 3, 4),
                    available_hours=16,
                    required_hours=24,
                    utilization_pct=150,
                ),
            ),
        ]
        adapter = TypeAdapter(list[Conflict])

        restored = adapter.validate_json(adapter.dump_json(conflicts))

        assert isinstance(restored[0].details, DoubleBookingDetails)
        assert isinstance(restored[1].details, OverCapacityDetails)
        assert restored[1].entity_id == Division.HVAC_COMMERCIAL
        assert restored[1].details.deficit == 8

    def test_detail_helpers(self):
        hours = HoursExceededDetails(
            employee_id=uuid4(),
            week_start=date(2024, 3, 3),
            week_end=date(2024, 3, 9),
            current_hours=32,
            proposed_hours=16,
            total_hours=48,
            max_hours=40,
        )
        overlap = OverlappingPhasesDetails(
            phase_id=uuid4(),
            dependency_id=uuid4(),
            phase_start=date(2024, 3, 6),
            dependency_end=date(2024, 3, 8),
        )
        assert hours.excess_hours == 8
        assert overlap.overlap_days == 3


def test_validation_result_validity_depends_on_blocking_conflicts():
    assert ValidationResult(conflicts=[double_booking(ConflictSeverity.MEDIUM)]).is_valid
    assert not ValidationResult(conflicts=[double_booking()]).is_valid
    assert ValidationResult().is_valid


def suggestion(confidence, impact=ImpactLevel.LOW, auto=False, cost=None):
    return ResolutionSuggestion(
        conflict_id=uuid4(),
        type=ResolutionType.ALTERNATE_EMPLOYEE,
        description="candidate",
        impact=impact,
        confidence=confidence,
        auto_applicable=auto,
        estimated_cost=cost,
    )


class TestSuggestionRanking:
    def test_ranking_is_deterministic_under_shuffling(self):
        suggestions = [
            suggestion(70),
            suggestion(90, ImpactLevel.MEDIUM),
            suggestion(90, ImpactLevel.LOW, cost=500),
            suggestion(90, ImpactLevel.LOW, auto=True),
            suggestion(50, cost=10),
        ]
        expected = rank_suggestions(suggestions)

        for seed in range(10):
            shuffled = suggestions[:]
            random.Random(seed).shuffle(shuffled)
            assert rank_suggestions(shuffled) == expected

        assert [s.confidence for s in expected] == [90, 90, 90, 70, 50]
        assert expected[0].auto_applicable
        assert expected[2].impact == ImpactLevel.MEDIUM

    def test_action_reads_implementation(self):
        reassign = suggestion(80).model_copy(
            update={
                "implementation": ReassignEmployee(
                    from_employee_id=uuid4(), to_employee_id=uuid4(), day=date(2024, 3, 4)
                )
            }
        )
        assert reassign.action == ResolutionAction.REASSIGN_EMPLOYEE
        assert suggestion(80).action is None

    def test_implementation_parsed_by_action(self):
        parsed = ResolutionSuggestion.model_validate(
            {
                "conflict_id": str(uuid4()),
                "type": "APPROVE_OVERTIME",
                "description": "Approve overtime",
                "impact": "MEDIUM",
                "confidence": 60,
                "implementation": {"action": "APPROVE_OVERTIME", "hours": 8, "hourly_rate": 90},
            }
        )
        assert isinstance(parsed.implementation, ApproveOvertime)
