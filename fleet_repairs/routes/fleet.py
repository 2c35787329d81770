# fleet_repairs/routes/fleet.py
from flask import Blueprint, jsonify

from fleet_repairs.db_models import Issue
from fleet_repairs.services.fleet_analytics import fleet_utilization
from fleet_repairs.utils.auth import staff_required
from fleet_repairs.utils.parsing import as_utc, iso

fleet_bp = Blueprint("fleet", __name__)


def build_timeline(issues):
    """Issue, work order, comment and completion events, newest first."""
    events = []
    for issue in issues:
        events.append({
            "id": f"issue-{issue.id}",
            "type": "issue_created",
            "date": issue.created_at,
            "title": f"Issue Reported: {issue.category}",
            "description": issue.description,
            "severity": issue.severity,
            "status": issue.status,
            "category": issue.category,
            "issueId": issue.id,
            "ticket": issue.ticket,
            "metadata": {"driverName": issue.driver_name, "location": issue.location},
        })
        for wo in issue.work_orders:
            events.append({
                "id": f"wo-{wo.id}",
                "type": "work_order",
                "date": wo.created_at,
                "title": f"Work Order: {wo.work_type or 'Repair'}",
                "description": wo.notes or "Scheduled for repair",
                "status": wo.status,
                "issueId": issue.id,
                "ticket": issue.ticket,
                "author": wo.assigned_to.name if wo.assigned_to else None,
                "metadata": {"workshopSite": wo.workshop_site, "startAt": iso(wo.start_at), "endAt": iso(wo.end_at)},
            })
        for comment in issue.comments:
            events.append({
                "id": f"comment-{comment.id}",
                "type": "comment",
                "date": comment.created_at,
                "title": "Update Added",
                "description": comment.body,
                "issueId": issue.id,
                "ticket": issue.ticket,
            })
        if issue.status == "COMPLETED":
            events.append({
                "id": f"completed-{issue.id}",
                "type": "completed",
                "date": issue.updated_at,
                "title": "Repair Completed",
                "description": f"{issue.category} issue resolved",
                "category": issue.category,
                "issueId": issue.id,
                "ticket": issue.ticket,
            })

    events.sort(key=lambda e: as_utc(e["date"]), reverse=True)
    for e in events:
        e["date"] = iso(e["date"])
    return events


def fleet_stats(issues):
    """issues must be newest first."""
    categories = []
    for i in issues:
        if i.category not in categories:
            categories.append(i.category)
    return {
        "totalIssues": len(issues),
        "completedRepairs": sum(1 for i in issues if i.status == "COMPLETED"),
        "pendingIssues": sum(1 for i in issues if i.status == "PENDING"),
        "inProgressIssues": sum(1 for i in issues if i.status == "IN_PROGRESS"),
        "criticalIssues": sum(1 for i in issues if i.severity == "CRITICAL"),
        "categories": categories,
        "firstIssueDate": iso(issues[-1].created_at) if issues else None,
        "lastIssueDate": iso(issues[0].created_at) if issues else None,
    }


# -----------------------------------------------------------------------------
# GET /api/fleet/<fleetNumber>/history
# -----------------------------------------------------------------------------
@fleet_bp.get("/api/fleet/<fleet_number>/history")
@staff_required
def fleet_history(fleet_number: str):
    issues = (
        Issue.query
        .filter(Issue.fleet_number == fleet_number)
        .order_by(Issue.created_at.desc(), Issue.id.desc())
        .all()
    )
    return jsonify({
        "fleetNumber": fleet_number,
        "timeline": build_timeline(issues),
        "stats": fleet_stats(issues),
        "issues": [
            {
                "id": i.id,
                "ticket": i.ticket,
                "status": i.status,
                "severity": i.severity,
                "category": i.category,
                "description": i.description,
                "createdAt": iso(i.created_at),
                "mediaCount": len(i.media),
            }
            for i in issues
        ],
    }), 200


# -----------------------------------------------------------------------------
# GET /api/fleet/<fleetNumber>/utilization
# -----------------------------------------------------------------------------
@fleet_bp.get("/api/fleet/<fleet_number>/utilization")
@staff_required
def fleet_utilization_view(fleet_number: str):
    return jsonify(fleet_utilization(fleet_number)), 200
