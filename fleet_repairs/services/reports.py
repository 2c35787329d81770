# fleet_repairs/services/reports.py
from __future__ import annotations
from collections import Counter
from datetime import datetime, timedelta
from typing import List, Optional

from dateutil.relativedelta import relativedelta

from fleet_repairs.services.fleet_analytics import repair_hours
from fleet_repairs.utils.parsing import as_utc

PERIODS = ("daily", "weekly", "monthly")
MAX_DAILY_BREAKDOWN = 31


def period_range(period: str, now: datetime, start: Optional[datetime] = None,
                 end: Optional[datetime] = None):
    """Report window for a period name; explicit start/end override either side."""
    now = as_utc(now)
    if period == "daily":
        default_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    elif period == "weekly":
        default_start = now - timedelta(days=7)
    elif period == "monthly":
        default_start = now - relativedelta(months=1)
    else:
        raise ValueError(f"period must be one of: {', '.join(PERIODS)}")
    return (start or default_start), (end or now)


def build_summary(period: str, start: datetime, end: datetime, issues: List, completed: List,
                  generated_at: datetime) -> dict:
    """
    issues: issues created inside the window.
    completed: issues completed (status COMPLETED, updated) inside the window.
    """
    start, end = as_utc(start), as_utc(end)
    total = len(issues)
    severity = Counter(i.severity for i in issues)
    status = Counter(i.status for i in issues)
    by_category = Counter(i.category for i in issues)
    by_fleet = Counter(i.fleet_number for i in issues)

    top_fleets = [{"fleet": f, "count": c} for f, c in by_fleet.most_common(10)]
    completed_count = len(completed)

    avg_resolution = 0.0
    if completed:
        avg_resolution = sum(repair_hours(i.created_at, i.updated_at) for i in completed) / completed_count

    most_common = by_category.most_common(1)
    return {
        "period": period,
        "dateRange": {"start": start.isoformat(), "end": end.isoformat()},
        "overview": {
            "totalIssues": total,
            "completedCount": completed_count,
            "resolutionRate": round(completed_count / total * 100) if total else 0,
            "avgResolutionHours": round(avg_resolution, 1),
        },
        "bySeverity": {
            "critical": severity["CRITICAL"],
            "high": severity["HIGH"],
            "medium": severity["MEDIUM"],
            "low": severity["LOW"],
        },
        "byStatus": {
            "pending": status["PENDING"],
            "inProgress": status["IN_PROGRESS"],
            "scheduled": status["SCHEDULED"],
            "completed": completed_count,
        },
        "byCategory": dict(by_category),
        "topFleets": top_fleets,
        "dailyBreakdown": daily_breakdown(start, end, issues, completed),
        "highlights": {
            "mostCommonCategory": most_common[0][0] if most_common else "N/A",
            "fleetWithMostIssues": top_fleets[0]["fleet"] if top_fleets else "N/A",
            "criticalPercentage": round(severity["CRITICAL"] / total * 100) if total else 0,
        },
        "generatedAt": as_utc(generated_at).isoformat(),
    }


def daily_breakdown(start: datetime, end: datetime, issues: List, completed: List) -> List[dict]:
    day = timedelta(days=1)
    seconds = (end - start).total_seconds()
    days = int(-(-seconds // day.total_seconds())) if seconds > 0 else 0
    rows = []
    for i in range(min(days, MAX_DAILY_BREAKDOWN)):
        day_start = start + i * day
        day_end = day_start + day
        created = [x for x in issues if day_start <= as_utc(x.created_at) < day_end]
        done = [x for x in completed if day_start <= as_utc(x.updated_at) < day_end]
        rows.append({
            "date": day_start.date().isoformat(),
            "created": len(created),
            "completed": len(done),
            "critical": sum(1 for x in created if x.severity == "CRITICAL"),
        })
    return rows


def email_subject(period: str) -> str:
    return f"SE Repairs {period.capitalize()} Summary Report"


def email_body(summary: dict) -> str:
    period = summary["period"].upper()
    rule = "=" * 55
    categories = sorted(summary["byCategory"].items(), key=lambda kv: kv[1], reverse=True)[:5]
    lines = [
        f"SE REPAIRS {period} SUMMARY REPORT",
        "",
        f"Generated: {summary['generatedAt']}",
        f"Period: {summary['dateRange']['start'][:10]} - {summary['dateRange']['end'][:10]}",
        "",
        rule,
        "OVERVIEW",
        f"- Total Issues Reported: {summary['overview']['totalIssues']}",
        f"- Issues Completed: {summary['overview']['completedCount']}",
        f"- Resolution Rate: {summary['overview']['resolutionRate']}%",
        f"- Avg Resolution Time: {summary['overview']['avgResolutionHours']} hours",
        "",
        rule,
        "BY SEVERITY",
        f"- Critical: {summary['bySeverity']['critical']}",
        f"- High: {summary['bySeverity']['high']}",
        f"- Medium: {summary['bySeverity']['medium']}",
        f"- Low: {summary['bySeverity']['low']}",
        "",
        rule,
        "BY STATUS",
        f"- Pending: {summary['byStatus']['pending']}",
        f"- In Progress: {summary['byStatus']['inProgress']}",
        f"- Scheduled: {summary['byStatus']['scheduled']}",
        f"- Completed: {summary['byStatus']['completed']}",
        "",
        rule,
        "TOP CATEGORIES",
        *[f"- {cat}: {count}" for cat, count in categories],
        "",
        rule,
        "TOP FLEETS (Most Issues)",
        *[f"- {f['fleet']}: {f['count']} issues" for f in summary["topFleets"][:5]],
        "",
        rule,
        "HIGHLIGHTS",
        f"- Most Common Issue: {summary['highlights']['mostCommonCategory']}",
        f"- Fleet Needing Attention: {summary['highlights']['fleetWithMostIssues']}",
        f"- Critical Issue Rate: {summary['highlights']['criticalPercentage']}%",
        "",
        rule,
        "This is an automated report from SE Repairs Fleet Management System.",
        "For detailed analytics, please log in to the admin dashboard.",
    ]
    return "\n".join(lines)
