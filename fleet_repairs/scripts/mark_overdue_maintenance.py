# fleet_repairs/scripts/mark_overdue_maintenance.py
"""
Flag SCHEDULED maintenance whose scheduled time has passed as OVERDUE.

    python -m fleet_repairs.scripts.mark_overdue_maintenance [--dry-run]
"""
import argparse
import logging

from fleet_repairs import create_app
from fleet_repairs.db_models import db, MaintenanceSchedule
from fleet_repairs.utils.parsing import utcnow

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
log = logging.getLogger("mark_overdue")


def overdue_schedules(now):
    return (
        MaintenanceSchedule.query
        .filter(MaintenanceSchedule.status == "SCHEDULED", MaintenanceSchedule.scheduled_at < now)
        .order_by(MaintenanceSchedule.scheduled_at)
        .all()
    )


def mark_overdue(now=None, dry_run=False):
    """Returns the schedules that are (or would be) flagged."""
    schedules = overdue_schedules(now or utcnow())
    for s in schedules:
        log.info("%s %s: %s (due %s)", "Would flag" if dry_run else "Flagging",
                 s.fleet_number, s.title, s.scheduled_at)
        if not dry_run:
            s.status = "OVERDUE"
    if dry_run:
        db.session.rollback()
    else:
        db.session.commit()
    return schedules


def main():
    parser = argparse.ArgumentParser(description="Mark past-due maintenance as OVERDUE")
    parser.add_argument("--dry-run", action="store_true", help="list schedules without changing them")
    args = parser.parse_args()

    app = create_app()
    with app.app_context():
        flagged = mark_overdue(dry_run=args.dry_run)
    log.info("%d schedule(s) %s", len(flagged), "overdue" if args.dry_run else "marked OVERDUE")


if __name__ == "__main__":
    main()
