# fleet_repairs/utils/serializers.py
"""camelCase JSON shapes shared by the API blueprints."""
from fleet_repairs.utils.parsing import iso


def serialize_user(u):
    if u is None:
        return None
    return {
        "id": u.id,
        "name": u.name,
        "email": u.email,
        "username": u.username,
        "role": u.role,
        "phone": u.phone,
        "createdAt": iso(u.created_at),
        "updatedAt": iso(u.updated_at),
    }


def user_summary(u):
    if u is None:
        return None
    return {"id": u.id, "name": u.name, "email": u.email}


def serialize_media(m):
    return {
        "id": m.id,
        "issueId": m.issue_id,
        "url": m.url,
        "type": m.type,
        "createdAt": iso(m.created_at),
    }


def serialize_comment(c):
    return {
        "id": c.id,
        "issueId": c.issue_id,
        "body": c.body,
        "authorId": c.author_id,
        "authorRole": c.author_role,
        "author": user_summary(c.author),
        "createdAt": iso(c.created_at),
    }


def serialize_work_order(wo, include_issue=False):
    data = {
        "id": wo.id,
        "issueId": wo.issue_id,
        "status": wo.status,
        "startAt": iso(wo.start_at),
        "endAt": iso(wo.end_at),
        "workshopSite": wo.workshop_site,
        "assignedToId": wo.assigned_to_id,
        "assignedTo": user_summary(wo.assigned_to),
        "workType": wo.work_type,
        "notes": wo.notes,
        "createdAt": iso(wo.created_at),
        "updatedAt": iso(wo.updated_at),
    }
    if include_issue and wo.issue is not None:
        data["issue"] = serialize_issue(wo.issue)
    return data


def serialize_issue(i, detail=False):
    data = {
        "id": i.id,
        "ticket": i.ticket,
        "status": i.status,
        "severity": i.severity,
        "category": i.category,
        "description": i.description,
        "safeToContinue": i.safe_to_continue,
        "location": i.location,
        "preferredFrom": iso(i.preferred_from),
        "preferredTo": iso(i.preferred_to),
        "fleetNumber": i.fleet_number,
        "primeRego": i.prime_rego,
        "trailerA": i.trailer_a,
        "trailerB": i.trailer_b,
        "driverName": i.driver_name,
        "driverPhone": i.driver_phone,
        "createdAt": iso(i.created_at),
        "updatedAt": iso(i.updated_at),
    }
    if detail:
        data["media"] = [serialize_media(m) for m in i.media]
        data["comments"] = [serialize_comment(c) for c in i.comments]
        data["workOrders"] = [serialize_work_order(wo) for wo in i.work_orders]
    return data


def serialize_mapping(m):
    return {
        "id": m.id,
        "kind": m.kind,
        "key": m.key,
        "value": m.parsed_value(),
        "updatedAt": iso(m.updated_at),
    }


def serialize_task(t):
    return {
        "id": t.id,
        "scheduleId": t.schedule_id,
        "name": t.name,
        "description": t.description,
        "completed": t.completed,
        "completedAt": iso(t.completed_at),
        "notes": t.notes,
        "createdAt": iso(t.created_at),
        "updatedAt": iso(t.updated_at),
    }


def serialize_schedule(s):
    return {
        "id": s.id,
        "fleetNumber": s.fleet_number,
        "title": s.title,
        "description": s.description,
        "type": s.type,
        "status": s.status,
        "scheduledAt": iso(s.scheduled_at),
        "completedAt": iso(s.completed_at),
        "assignedToId": s.assigned_to_id,
        "assignedTo": user_summary(s.assigned_to),
        "priority": s.priority,
        "estimatedHours": s.estimated_hours,
        "actualHours": s.actual_hours,
        "cost": s.cost,
        "notes": s.notes,
        "recurring": s.recurring,
        "recurringInterval": s.recurring_interval,
        "recurringNextDate": iso(s.recurring_next_date),
        "tasks": [serialize_task(t) for t in s.tasks],
        "createdAt": iso(s.created_at),
        "updatedAt": iso(s.updated_at),
    }


def serialize_cost(c):
    return {
        "id": c.id,
        "issueId": c.issue_id,
        "workOrderId": c.work_order_id,
        "maintenanceScheduleId": c.maintenance_schedule_id,
        "category": c.category,
        "description": c.description,
        "amount": c.amount,
        "currency": c.currency,
        "supplier": c.supplier,
        "invoiceNumber": c.invoice_number,
        "invoiceDate": iso(c.invoice_date),
        "approvedBy": c.approved_by,
        "approvedAt": iso(c.approved_at),
        "createdAt": iso(c.created_at),
        "updatedAt": iso(c.updated_at),
    }


def serialize_driver_performance(r):
    return {
        "id": r.id,
        "driverName": r.driver_name,
        "driverEmail": r.driver_email,
        "fleetNumber": r.fleet_number,
        "periodStart": iso(r.period_start),
        "periodEnd": iso(r.period_end),
        "issuesReported": r.issues_reported,
        "issuesResolved": r.issues_resolved,
        "avgResponseTime": r.avg_response_time,
        "safeDrivingScore": r.safe_driving_score,
        "fuelEfficiency": r.fuel_efficiency,
        "onTimeDeliveryRate": r.on_time_delivery_rate,
        "notes": r.notes,
        "createdAt": iso(r.created_at),
        "updatedAt": iso(r.updated_at),
    }


def serialize_equipment_request(r):
    issue = r.issue
    return {
        "id": r.id,
        "issueId": r.issue_id,
        "issue": {"id": issue.id, "ticket": issue.ticket, "fleetNumber": issue.fleet_number} if issue else None,
        "requestedById": r.requested_by_id,
        "requestedBy": user_summary(r.requested_by),
        "requestedByRole": r.requested_by_role,
        "itemName": r.item_name,
        "itemDescription": r.item_description,
        "quantity": r.quantity,
        "estimatedCost": r.estimated_cost,
        "supplier": r.supplier,
        "partNumber": r.part_number,
        "reason": r.reason,
        "fleetNumber": r.fleet_number,
        "priority": r.priority,
        "urgentReason": r.urgent_reason,
        "status": r.status,
        "approvedAt": iso(r.approved_at),
        "approvedBy": r.approved_by,
        "orderedAt": iso(r.ordered_at),
        "receivedAt": iso(r.received_at),
        "cancelledAt": iso(r.cancelled_at),
        "cancellationReason": r.cancellation_reason,
        "notes": r.notes,
        "createdAt": iso(r.created_at),
        "updatedAt": iso(r.updated_at),
    }
