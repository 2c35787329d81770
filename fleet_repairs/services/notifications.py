# fleet_repairs/services/notifications.py
"""
Rule-driven notifications for issue lifecycle events.

A trigger (issue_created, issue_updated, parts_needed, ...) is matched
against the enabled rules; each matching rule renders its template and is
dispatched on its channels. Email goes out through Flask-Mail, SMS is
recorded in the log, push and dashboard messages go to the event stream.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from flask import current_app
from flask_mail import Message

from fleet_repairs.extensions import mail
from fleet_repairs.services.events import broadcast_update
from fleet_repairs.utils.parsing import datetime_or_none

logger = logging.getLogger(__name__)

SMS_MAX_LENGTH = 160
PRIORITIES = ("LOW", "MEDIUM", "HIGH", "CRITICAL")


@dataclass(frozen=True)
class NotificationRule:
    id: str
    name: str
    trigger: str
    template: str
    channels: Sequence[str]
    priority: str
    roles: Sequence[str] = ()
    emails: Sequence[str] = ()
    phones: Sequence[str] = ()
    severity: Sequence[str] = ()
    status: Sequence[str] = ()
    category: Sequence[str] = ()
    fleet_numbers: Sequence[str] = ()
    time_threshold_minutes: Optional[int] = None
    enabled: bool = True


@dataclass
class Notification:
    type: str
    title: str
    message: str
    recipients: List[str]
    channels: List[str]
    priority: str
    data: Dict = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self):
        return {
            "trigger": self.type,
            "title": self.title,
            "message": self.message,
            "recipients": list(self.recipients),
            "channels": list(self.channels),
            "priority": self.priority,
            "timestamp": self.timestamp.isoformat(),
        }


DEFAULT_RULES = (
    NotificationRule(
        id="critical-issue-alert",
        name="Critical Issue Alert",
        trigger="issue_created",
        severity=("CRITICAL",),
        roles=("OPERATIONS", "ADMIN"),
        emails=("operations@senational.com.au", "workshop@senational.com.au"),
        channels=("email", "sms", "dashboard"),
        template=("CRITICAL ALERT: {fleetNumber} - {category} issue reported by {driverName}. "
                  "Location: {location}. Immediate attention required."),
        priority="CRITICAL",
    ),
    NotificationRule(
        id="repair-completed",
        name="Repair Completed Notification",
        trigger="issue_updated",
        status=("COMPLETED",),
        roles=("DRIVER", "OPERATIONS"),
        channels=("sms", "dashboard"),
        template=("Good news! Your vehicle {fleetNumber} repair is complete and ready for pickup. "
                  "Contact workshop for details."),
        priority="MEDIUM",
    ),
    NotificationRule(
        id="parts-needed-alert",
        name="Parts Required Alert",
        trigger="parts_needed",
        roles=("OPERATIONS", "ADMIN"),
        emails=("parts@senational.com.au",),
        channels=("email", "dashboard"),
        template=("Parts required for {fleetNumber} - {category} repair. "
                  "Estimated cost: ${estimatedCost}. Lead time: {leadTime}."),
        priority="HIGH",
    ),
    NotificationRule(
        id="high-priority-update",
        name="High Priority Issue Update",
        trigger="issue_updated",
        severity=("HIGH", "CRITICAL"),
        roles=("OPERATIONS",),
        channels=("dashboard", "push"),
        template="Update on {fleetNumber}: Status changed to {status}. {updateMessage}",
        priority="HIGH",
    ),
    NotificationRule(
        id="daily-summary",
        name="Daily Operations Summary",
        trigger="daily_summary",
        roles=("ADMIN",),
        channels=("email",),
        template="Daily Summary: {totalIssues} new issues, {criticalCount} critical, {completedCount} completed.",
        priority="LOW",
    ),
)

# placeholder -> (data key, fallback)
_PLACEHOLDERS = {
    "{fleetNumber}": ("fleetNumber", "Unknown"),
    "{category}": ("category", "General"),
    "{driverName}": ("driverName", "Driver"),
    "{location}": ("location", "Unknown location"),
    "{status}": ("status", "Unknown"),
    "{updateMessage}": ("updateMessage", ""),
    "{estimatedCost}": ("estimatedCost", "0"),
    "{leadTime}": ("leadTime", "Unknown"),
    "{totalIssues}": ("totalIssues", "0"),
    "{criticalCount}": ("criticalCount", "0"),
    "{completedCount}": ("completedCount", "0"),
}


def matches_conditions(rule: NotificationRule, data: dict, now: Optional[datetime] = None) -> bool:
    """A condition only applies when both the rule and the event carry the field."""
    checks = (
        (rule.severity, data.get("severity")),
        (rule.status, data.get("status")),
        (rule.category, data.get("category")),
        (rule.fleet_numbers, data.get("fleetNumber")),
    )
    for allowed, value in checks:
        if allowed and value and value not in allowed:
            return False

    if rule.time_threshold_minutes and data.get("createdAt"):
        created = datetime_or_none(data["createdAt"])
        if created is not None:
            now = now or datetime.now(timezone.utc)
            minutes_old = (now - created).total_seconds() / 60
            if minutes_old < rule.time_threshold_minutes:
                return False
    return True


def render_template(template: str, data: dict) -> str:
    message = template
    for placeholder, (key, fallback) in _PLACEHOLDERS.items():
        value = data.get(key)
        message = message.replace(placeholder, str(value) if value not in (None, "") else fallback)
    return message


def build_notification(rule: NotificationRule, data: dict) -> Notification:
    return Notification(
        type=rule.trigger,
        title=rule.name,
        message=render_template(rule.template, data),
        recipients=[*rule.emails, *rule.phones],
        channels=list(rule.channels),
        priority=rule.priority,
        data=data,
    )


def matching_notifications(trigger: str, data: dict, rules=DEFAULT_RULES) -> List[Notification]:
    return [
        build_notification(rule, data)
        for rule in rules
        if rule.enabled and rule.trigger == trigger and matches_conditions(rule, data)
    ]


def process_notification(trigger: str, data: dict, rules=DEFAULT_RULES) -> List[Notification]:
    """Build and dispatch every notification the trigger produces."""
    notifications = matching_notifications(trigger, data, rules)
    for notification in notifications:
        dispatch(notification)
    return notifications


def dispatch(notification: Notification):
    logger.info("Sending notification %s on %s", notification.title, ",".join(notification.channels))
    emails = [r for r in notification.recipients if "@" in r]
    phones = [r for r in notification.recipients if "@" not in r]
    for channel in notification.channels:
        # one failed channel must not stop the others
        try:
            if channel == "email":
                if emails:
                    send_email(emails, notification.title, notification.message, notification.priority)
            elif channel == "sms":
                send_sms(phones, notification.message[:SMS_MAX_LENGTH], notification.priority)
            elif channel in ("push", "dashboard"):
                broadcast_update({"type": "notification", "channel": channel, **notification.to_dict()})
        except Exception:
            logger.exception("%s notification failed for %s", channel, notification.title)


def send_email(recipients: Sequence[str], subject: str, body: str, priority: str = "MEDIUM"):
    msg = Message(
        subject=f"[{priority}] {subject}" if priority in ("HIGH", "CRITICAL") else subject,
        recipients=list(recipients),
        body=body,
        sender=current_app.config.get("MAIL_DEFAULT_SENDER"),
    )
    mail.send(msg)
    logger.info("Email sent to %d recipient(s): %s", len(recipients), subject)


def send_sms(recipients: Sequence[str], message: str, priority: str = "MEDIUM"):
    if len(message) > SMS_MAX_LENGTH:
        raise ValueError(f"SMS message exceeds {SMS_MAX_LENGTH} characters")
    # No SMS gateway is wired up; the dispatch is kept in the log.
    logger.info("SMS (%s) to %d recipient(s): %s", priority, len(recipients), message)


def issue_event_data(issue, update_message=None) -> dict:
    return {
        "issueId": issue.id,
        "ticket": issue.ticket,
        "fleetNumber": issue.fleet_number,
        "category": issue.category,
        "severity": issue.severity,
        "status": issue.status,
        "driverName": issue.driver_name,
        "location": issue.location,
        "updateMessage": update_message,
        "createdAt": issue.created_at.isoformat() if issue.created_at else None,
    }


def notify_new_issue(issue):
    return process_notification("issue_created", issue_event_data(issue))


def notify_issue_update(issue, update_message=None):
    return process_notification("issue_updated", issue_event_data(issue, update_message))


def notify_parts_needed(fleet_number, category, estimated_cost, lead_time):
    return process_notification("parts_needed", {
        "fleetNumber": fleet_number,
        "category": category,
        "estimatedCost": estimated_cost,
        "leadTime": lead_time,
    })


def notify_daily_summary(total_issues, critical_count, completed_count, recipients=None):
    """Emails go to `recipients`, or REPORT_RECIPIENTS when none are given."""
    if recipients is None:
        recipients = current_app.config.get("REPORT_RECIPIENTS", [])
    rules = tuple(
        replace(rule, emails=tuple(recipients)) if rule.trigger == "daily_summary" else rule
        for rule in DEFAULT_RULES
    )
    return process_notification("daily_summary", {
        "totalIssues": total_issues,
        "criticalCount": critical_count,
        "completedCount": completed_count,
    }, rules=rules)
