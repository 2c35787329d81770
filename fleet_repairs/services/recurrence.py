# fleet_repairs/services/recurrence.py
from datetime import datetime, timedelta
from dateutil.relativedelta import relativedelta

INTERVAL_STEPS = {
    "daily": timedelta(days=1),
    "weekly": timedelta(days=7),
    "monthly": relativedelta(months=1),
    "yearly": relativedelta(years=1),
}


def next_occurrence(date: datetime, interval: str) -> datetime:
    """
    Step a schedule date forward by one recurrence interval.

    Months and years are calendar steps; a day that does not exist in the
    target month clamps to its last day (Jan 31 -> Feb 28/29).
    """
    try:
        step = INTERVAL_STEPS[interval]
    except KeyError:
        raise ValueError(f"Unknown recurring interval: {interval!r}") from None
    return date + step


def build_next_schedule_fields(schedule):
    """
    Field values for the occurrence that follows `schedule`, or None when
    the schedule does not recur (or has no next date yet).
    """
    if not (schedule.recurring and schedule.recurring_interval and schedule.recurring_next_date):
        return None

    next_date = schedule.recurring_next_date
    return {
        "fleet_number": schedule.fleet_number,
        "title": schedule.title,
        "description": schedule.description,
        "type": schedule.type,
        "scheduled_at": next_date,
        "assigned_to_id": schedule.assigned_to_id,
        "priority": schedule.priority,
        "estimated_hours": schedule.estimated_hours,
        "cost": schedule.cost,
        "notes": schedule.notes,
        "recurring": True,
        "recurring_interval": schedule.recurring_interval,
        "recurring_next_date": next_occurrence(next_date, schedule.recurring_interval),
    }
