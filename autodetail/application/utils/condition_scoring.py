from __future__ import annotations

from autodetail.domain.entities.assessment import ConditionAssessment, ConditionGrade

MIN_CONDITION_MULTIPLIER = 0.9
MAX_CONDITION_MULTIPLIER = 2.0

GRADE_SCORES: dict[ConditionGrade, float] = {
    ConditionGrade.excellent: 0.9,
    ConditionGrade.good: 1.0,
    ConditionGrade.fair: 1.2,
    ConditionGrade.poor: 1.5,
}


def exterior_penalty(condition: ConditionAssessment) -> float:
    ext = condition.exterior
    return (0.10 if ext.scratches else 0.0) + (0.10 if ext.dents else 0.0) + (0.15 if ext.rust else 0.0)


def interior_penalty(condition: ConditionAssessment) -> float:
    inner = condition.interior
    return (0.10 if inner.stains else 0.0) + (0.15 if inner.odors else 0.0) + (0.10 if inner.pet_hair else 0.0)


def overall_penalty(condition: ConditionAssessment) -> float:
    return 0.10 if condition.overall.smoking_vehicle else 0.0


def condition_multiplier(condition: ConditionAssessment) -> float:
    """
    Map a self-assessment to a single price multiplier in [0.9, 2.0].

    The paint grade and the mean of the three interior grades are averaged,
    then every wear flag adds its fixed penalty.
    """
    exterior_score = GRADE_SCORES[condition.exterior.paint]
    interior_grades = (condition.interior.seats, condition.interior.carpet, condition.interior.dashboard)
    interior_score = sum(GRADE_SCORES[g] for g in interior_grades) / len(interior_grades)

    raw = (
        (exterior_score + interior_score) / 2
        + exterior_penalty(condition)
        + interior_penalty(condition)
        + overall_penalty(condition)
    )
    return max(MIN_CONDITION_MULTIPLIER, min(MAX_CONDITION_MULTIPLIER, raw))
