from __future__ import annotations

from autodetail.domain.entities.assessment import AssessmentStatus
from autodetail.domain.entities.booking import BookingStatus

# Operator-driven booking moves. The lifecycle workflow only ever performs
# confirmed -> in-progress, through a compare-and-set.
BOOKING_TRANSITIONS: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.pending: {BookingStatus.confirmed, BookingStatus.cancelled},
    BookingStatus.confirmed: {BookingStatus.in_progress, BookingStatus.cancelled},
    BookingStatus.in_progress: {BookingStatus.completed},
    BookingStatus.completed: set(),
    BookingStatus.cancelled: set(),
}

ASSESSMENT_TRANSITIONS: dict[AssessmentStatus, set[AssessmentStatus]] = {
    AssessmentStatus.draft: {AssessmentStatus.submitted},
    AssessmentStatus.submitted: {AssessmentStatus.reviewed},
    AssessmentStatus.reviewed: {AssessmentStatus.approved},
    AssessmentStatus.approved: {AssessmentStatus.converted},
    AssessmentStatus.converted: set(),
}


def can_transition_booking(current: BookingStatus, new: BookingStatus) -> bool:
    return new in BOOKING_TRANSITIONS.get(current, set())


def can_transition_assessment(current: AssessmentStatus, new: AssessmentStatus) -> bool:
    return new in ASSESSMENT_TRANSITIONS.get(current, set())
