"""
Tests for condition-based assessment pricing.
"""

import pytest

from autodetail.application.use_cases.assessment_pricing import price_by_condition
from autodetail.application.utils.condition_scoring import condition_multiplier
from autodetail.domain.entities.assessment import (
    ConditionAssessment,
    ConditionGrade,
    ExteriorCondition,
    InteriorCondition,
    OverallCondition,
)
from autodetail.domain.entities.service import Service
from autodetail.domain.entities.vehicle import VehicleType

from conftest import make_service

POOR = ConditionGrade.poor
EXCELLENT = ConditionGrade.excellent


def test_good_condition_is_neutral():
    assert condition_multiplier(ConditionAssessment()) == pytest.approx(1.0)


def test_worst_case_is_clamped_to_two():
    condition = ConditionAssessment(
        exterior=ExteriorCondition(paint=POOR, scratches=True, dents=True, rust=True),
        interior=InteriorCondition(seats=POOR, carpet=POOR, dashboard=POOR, stains=True, odors=True, pet_hair=True),
        overall=OverallCondition(smoking_vehicle=True),
    )

    assert condition_multiplier(condition) == 2.0


def test_pristine_vehicle_floors_at_point_nine():
    condition = ConditionAssessment(
        exterior=ExteriorCondition(paint=EXCELLENT),
        interior=InteriorCondition(seats=EXCELLENT, carpet=EXCELLENT, dashboard=EXCELLENT),
    )

    assert condition_multiplier(condition) == pytest.approx(0.9)


def test_interior_grades_are_averaged():
    condition = ConditionAssessment(
        interior=InteriorCondition(seats=POOR, carpet=ConditionGrade.good, dashboard=ConditionGrade.fair),
    )

    # (1.0 + (1.5 + 1.0 + 1.2) / 3) / 2
    assert condition_multiplier(condition) == pytest.approx(1.1166666, rel=1e-5)


def test_fair_paint_with_scratches(store):
    """Fair paint plus scratches on a 100 service gives 120 with neutral demand."""
    service = make_service(store, base_price=100)
    condition = ConditionAssessment(exterior=ExteriorCondition(paint=ConditionGrade.fair, scratches=True))

    quote = price_by_condition([service], VehicleType.sedan, condition)

    assert quote.factors.condition_multiplier == pytest.approx(1.2)
    assert quote.factors.demand_multiplier == 1.0
    assert quote.estimated_price == 120
    assert quote.warnings == []


def test_condition_price_uses_vehicle_multipliers(store):
    service = make_service(store, base_price=150, multipliers={"truck": 1.4})
    condition = ConditionAssessment(interior=InteriorCondition(pet_hair=True, odors=True))

    quote = price_by_condition([service], VehicleType.truck, condition)

    # 150 x 1.4 = 210; multiplier 1.0 + 0.25
    assert quote.factors.base_price == 210
    assert quote.estimated_price == 263


def test_condition_price_warning_names_the_vehicle_type():
    """A defaulted multiplier is reported with the plain vehicle type value."""
    service = Service.from_document(
        {
            "id": "legacy",
            "name": "Legacy Wash",
            "category": "exterior",
            "base_price": 100,
            "vehicle_type_multipliers": {"sedan": 1.0},
        }
    )

    quote = price_by_condition([service], VehicleType.suv, ConditionAssessment())

    assert quote.estimated_price == 100
    assert quote.warnings == ["Legacy Wash: no multiplier for 'suv', using 1.0"]
