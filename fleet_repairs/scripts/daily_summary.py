# fleet_repairs/scripts/daily_summary.py
"""
Run the daily-summary notification rule for today's activity.

    python -m fleet_repairs.scripts.daily_summary
"""
import logging

from fleet_repairs import create_app
from fleet_repairs.db_models import Issue
from fleet_repairs.services.dashboard import melbourne_day_start
from fleet_repairs.services.notifications import notify_daily_summary
from fleet_repairs.utils.parsing import utcnow

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
log = logging.getLogger("daily_summary")


def todays_counts(now=None):
    start = melbourne_day_start(now or utcnow())
    reported = Issue.query.filter(Issue.created_at >= start)
    total = reported.count()
    critical = reported.filter(Issue.severity == "CRITICAL").count()
    completed = Issue.query.filter(Issue.status == "COMPLETED", Issue.updated_at >= start).count()
    return total, critical, completed


def main():
    app = create_app()
    with app.app_context():
        total, critical, completed = todays_counts()
        sent = notify_daily_summary(total, critical, completed)
    log.info("Daily summary: %d reported, %d critical, %d completed (%d notification(s))",
             total, critical, completed, len(sent))


if __name__ == "__main__":
    main()
