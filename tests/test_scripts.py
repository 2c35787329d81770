from datetime import timedelta

from fleet_repairs.db_models import db, MaintenanceSchedule
from fleet_repairs.scripts.daily_summary import todays_counts
from fleet_repairs.scripts.mark_overdue_maintenance import mark_overdue
from fleet_repairs.utils.parsing import utcnow


def _schedule(title, scheduled_at, status="SCHEDULED"):
    return MaintenanceSchedule(fleet_number="412", title=title, scheduled_at=scheduled_at, status=status)


def test_mark_overdue(test_app):
    now = utcnow()
    db.session.add_all([
        _schedule("Past", now - timedelta(days=2)),
        _schedule("Future", now + timedelta(days=2)),
        _schedule("Done", now - timedelta(days=5), status="COMPLETED"),
    ])
    db.session.commit()

    flagged = mark_overdue(now=now)
    assert [s.title for s in flagged] == ["Past"]
    statuses = {s.title: s.status for s in MaintenanceSchedule.query.all()}
    assert statuses == {"Past": "OVERDUE", "Future": "SCHEDULED", "Done": "COMPLETED"}


def test_mark_overdue_dry_run_changes_nothing(test_app):
    db.session.add(_schedule("Past", utcnow() - timedelta(days=1)))
    db.session.commit()

    assert len(mark_overdue(dry_run=True)) == 1
    assert MaintenanceSchedule.query.one().status == "SCHEDULED"


def test_todays_counts(test_app, make_issue):
    now = utcnow()
    make_issue(severity="CRITICAL")
    make_issue(status="COMPLETED")
    make_issue(created_at=now - timedelta(days=3), updated_at=now - timedelta(days=3))
    assert todays_counts(now) == (2, 1, 1)
