import uuid
from datetime import datetime
from types import SimpleNamespace

import pytest

from feedback360.core.aggregation import (
    cross_reviewer_average,
    dashboard_stats,
    latest_completed_lead_review,
    peer_feedback_average,
    report_stats,
)
from feedback360.models.lead_review import LeadReview
from tests.helpers import add_peer_feedback, create_cycle, create_employee, create_request


def fb(reviewer_id, *ratings):
    return SimpleNamespace(reviewer_id=reviewer_id, ratings=ratings)


def test_peer_feedback_average_rounds_to_one_decimal():
    assert peer_feedback_average((4, 5, 3, 4, 5)) == 4.2
    assert peer_feedback_average((3, 4, 4, 4, 4)) == 3.8
    with pytest.raises(ValueError):
        peer_feedback_average(())


def test_cross_reviewer_average_weights_reviewers_equally():
    a, b = uuid.uuid4(), uuid.uuid4()
    feedbacks = [fb(a, 4, 5, 3, 4, 5), fb(b, 3, 3, 3, 3, 3), fb(b, 3, 3, 3, 3, 3)]
    assert cross_reviewer_average(feedbacks) == 3.6


def test_cross_reviewer_average_is_not_a_flat_mean():
    a, b = uuid.uuid4(), uuid.uuid4()
    # a: 4.0 and 3.6 -> 3.8, b: 3.0. A flat mean of the three submissions would give 3.5
    assert cross_reviewer_average([fb(a, 4, 4, 4, 4, 4), fb(a, 3, 3, 4, 4, 4), fb(b, 3, 3, 3, 3, 3)]) == 3.4


def test_cross_reviewer_average_empty():
    assert cross_reviewer_average([]) is None


def test_dashboard_stats(db_session):
    cycle = create_cycle(db_session)
    me = create_employee(db_session, "Mia Me")
    lead = create_employee(db_session, "Lena Lead", role="lead")
    t1 = create_employee(db_session, "Tia One")
    t2 = create_employee(db_session, "Tom Two")
    t3 = create_employee(db_session, "Ted Three")

    add_peer_feedback(db_session, create_request(db_session, cycle, me, t1))
    create_request(db_session, cycle, me, t2)
    create_request(db_session, cycle, me, t3)

    stats = dashboard_stats(db_session, me.id)
    assert stats.pending_feedback_count == 2
    assert stats.completed_feedback_count == 1
    assert stats.my_latest_rating is None

    older = create_cycle(db_session, "2025 Annual Review", 2025, active=False)
    for c, rating, when in ((older, 2, datetime(2025, 6, 1)), (cycle, 5, datetime(2026, 6, 1))):
        db_session.add(LeadReview(
            lead_id=lead.id,
            employee_id=me.id,
            appraisal_cycle_id=c.id,
            final_rating=rating,
            promotion_decision="Hold",
            remarks="Good progress overall",
            status="completed",
            submitted_at=when,
        ))
    db_session.commit()

    assert dashboard_stats(db_session, me.id).my_latest_rating == 5
    assert latest_completed_lead_review(db_session, me.id).final_rating == 5


def test_report_stats_counts_every_cycle(db_session):
    cycle = create_cycle(db_session)
    old = create_cycle(db_session, "2025 Annual Review", 2025, active=False)
    lead = create_employee(db_session, "Lena Lead", role="lead")
    a = create_employee(db_session, "Ann")
    b = create_employee(db_session, "Ben")

    add_peer_feedback(db_session, create_request(db_session, old, a, b))
    create_request(db_session, cycle, a, b)
    create_request(db_session, cycle, b, a)
    for c, emp, rating, status in ((old, a, 4, "completed"), (cycle, a, 2, "completed"), (cycle, b, 3, "in_progress")):
        db_session.add(LeadReview(
            lead_id=lead.id,
            employee_id=emp.id,
            appraisal_cycle_id=c.id,
            final_rating=rating,
            promotion_decision="Hold",
            remarks="Reviewed by the lead",
            status=status,
        ))
    db_session.commit()

    stats = report_stats(db_session)
    assert stats.total_employees == 3
    assert stats.completed_feedback == 1
    assert stats.pending_feedback == 2
    assert stats.completed_lead_reviews == 2
    assert stats.pending_lead_reviews == 1
    assert stats.completed_manager_reviews == 0
    assert stats.average_rating == 3
    assert stats.rating_distribution == [
        {"rating": 1, "count": 0},
        {"rating": 2, "count": 1},
        {"rating": 3, "count": 0},
        {"rating": 4, "count": 1},
        {"rating": 5, "count": 0},
    ]
