# fleet_repairs/scripts/seed.py
"""
Demo data for local development.

    python -m fleet_repairs.scripts.seed            # add whatever is missing
    python -m fleet_repairs.scripts.seed --reset    # wipe issues/mappings first
"""
import argparse
import json
import logging
from datetime import timedelta

from tqdm import tqdm

from fleet_repairs import create_app
from fleet_repairs.db_models import db, Comment, Issue, Mapping, Media, User, WorkOrder
from fleet_repairs.utils.parsing import utcnow

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
log = logging.getLogger("seed")

DEMO_PASSWORD = "password123"

USERS = (
    {"email": "admin@example.com", "username": "admin", "name": "Admin User", "role": "ADMIN"},
    {"email": "ops@example.com", "username": "ops", "name": "Operations Team", "role": "OPERATIONS"},
    {"email": "workshop@example.com", "username": "workshop", "name": "Workshop Team", "role": "WORKSHOP"},
    {"email": "driver@example.com", "username": "driver", "name": "Test Driver", "role": "DRIVER",
     "phone": "+61 412 345 678"},
)

DRIVERS = (
    {"name": "John Smith", "phone": "0412 345 678", "employeeId": "EMP001", "status": "active"},
    {"name": "Sarah Jones", "phone": "0423 456 789", "employeeId": "EMP002", "status": "active"},
    {"name": "Mick Brown", "phone": "0434 567 890", "employeeId": "EMP003", "status": "active"},
    {"name": "Priya Patel", "phone": "0445 678 901", "employeeId": "EMP004", "status": "leave"},
)

FLEETS = (
    {"fleetNumber": "T101", "rego": "XQG984", "type": "Prime Mover", "location": "Melbourne Depot"},
    {"fleetNumber": "T215", "rego": "ABC123", "type": "Prime Mover", "location": "Sydney Depot"},
    {"fleetNumber": "T342", "rego": "DEF456", "type": "Rigid", "location": "Brisbane Depot"},
    {"fleetNumber": "T410", "rego": "GHI789", "type": "Prime Mover", "location": "Adelaide Depot"},
    {"fleetNumber": "T455", "rego": "JKL012", "type": "B-Double", "location": "Perth Depot"},
)

TRAILERS = (
    {"fleetNumber": "TR01", "rego": "TRL001", "type": "Flat Top"},
    {"fleetNumber": "TR02", "rego": "TRL002", "type": "Curtainsider"},
    {"fleetNumber": "TR03", "rego": "TRL003", "type": "Refrigerated"},
    {"fleetNumber": "TR04", "rego": "TRL004", "type": "Tanker"},
)

ISSUES = (
    ("CRITICAL", "Brakes", "Brake pedal goes to floor, no braking power. Vehicle cannot stop safely.",
     "No", "M1 Southbound, Exit 49", "PENDING"),
    ("HIGH", "Engine", "Engine overheating, temperature gauge in red zone while coolant looks normal.",
     "No", "Pacific Highway, Coffs Harbour", "IN_PROGRESS"),
    ("HIGH", "Tires", "Front left tyre has a large bulge on the sidewall and could blow at any moment.",
     "No", "Sydney Depot", "SCHEDULED"),
    ("MEDIUM", "Electrical", "Dashboard warning lights flickering and the battery light comes on intermittently.",
     "Yes", "Melbourne Depot", "PENDING"),
    ("MEDIUM", "Suspension", "Loud clunking noise from rear suspension over bumps, getting worse.",
     "Yes", "Hume Highway, Goulburn", "IN_PROGRESS"),
    ("LOW", "Body", "Small dent in passenger door from a loading dock incident. Cosmetic only.",
     "Yes", "Darwin Depot", "COMPLETED"),
    ("HIGH", "Transmission", "Gearbox slipping badly in 5th and 6th gear with a burning smell.",
     "No", "Adelaide Depot", "PENDING"),
    ("MEDIUM", "Other", "Windscreen wipers not working properly and leaving streaks.",
     "Yes", "Newcastle Depot", "COMPLETED"),
)

WORKSHOP_SITES = ("Melbourne", "Sydney", "Brisbane", "Adelaide", "Perth")


def seed_users():
    created = 0
    for fields in USERS:
        if User.query.filter_by(email=fields["email"]).first():
            continue
        user = User(**fields)
        user.set_password(DEMO_PASSWORD)
        db.session.add(user)
        created += 1
    db.session.commit()
    log.info("Users: %d created", created)


def _upsert_mapping(kind, key, value):
    mapping = Mapping.query.filter_by(kind=kind, key=key).first()
    if mapping is None:
        db.session.add(Mapping(kind=kind, key=key, value=json.dumps(value)))
        return 1
    return 0


def seed_mappings():
    created = 0
    for d in DRIVERS:
        created += _upsert_mapping("driver", d["name"], {k: v for k, v in d.items() if k != "name"})
    for f in FLEETS:
        created += _upsert_mapping("fleet", f["fleetNumber"], {k: v for k, v in f.items() if k != "fleetNumber"})
    for t in TRAILERS:
        created += _upsert_mapping("trailer", t["fleetNumber"], {k: v for k, v in t.items() if k != "fleetNumber"})
    db.session.commit()
    log.info("Mappings: %d created", created)


def seed_issues():
    if Issue.query.count():
        log.info("Issues already present, skipping sample issues")
        return

    ops = User.query.filter_by(email="ops@example.com").first()
    workshop = User.query.filter_by(email="workshop@example.com").first()
    now = utcnow()

    for i, (severity, category, description, safe, location, status) in enumerate(tqdm(ISSUES, desc="Issues")):
        fleet = FLEETS[i % len(FLEETS)]
        driver = DRIVERS[i % len(DRIVERS)]
        created_at = now - timedelta(days=i // 3, hours=i)
        issue = Issue(
            ticket=Issue.next_ticket(),
            status=status,
            severity=severity,
            category=category,
            description=description,
            safe_to_continue=safe,
            location=location,
            fleet_number=fleet["fleetNumber"],
            prime_rego=fleet["rego"],
            trailer_a=TRAILERS[(i * 2) % len(TRAILERS)]["fleetNumber"],
            trailer_b=TRAILERS[(i * 2 + 1) % len(TRAILERS)]["fleetNumber"],
            driver_name=driver["name"],
            driver_phone=driver["phone"],
            preferred_from=created_at + timedelta(days=1),
            preferred_to=created_at + timedelta(days=3),
            created_at=created_at,
            updated_at=created_at + timedelta(hours=6) if status == "COMPLETED" else created_at,
        )
        db.session.add(issue)
        db.session.flush()

        if i % 3 == 0 and ops:
            db.session.add(Comment(
                issue_id=issue.id, author_id=ops.id, author_role=ops.role,
                body="Acknowledged. Assigning to workshop for immediate attention.",
                created_at=created_at + timedelta(hours=1),
            ))
        if i % 4 == 0 and workshop:
            db.session.add(Comment(
                issue_id=issue.id, author_id=workshop.id, author_role=workshop.role,
                body="Parts ordered. Will schedule repair once parts arrive.",
                created_at=created_at + timedelta(hours=3),
            ))
        if status in ("SCHEDULED", "IN_PROGRESS"):
            start = now + timedelta(days=i + 1)
            db.session.add(WorkOrder(
                issue_id=issue.id,
                status="IN_PROGRESS" if status == "IN_PROGRESS" else "SCHEDULED",
                start_at=start,
                end_at=start + timedelta(hours=4),
                workshop_site=WORKSHOP_SITES[i % len(WORKSHOP_SITES)],
                assigned_to_id=workshop.id if workshop else None,
                work_type=f"{category} Repair",
            ))

    db.session.commit()
    log.info("Issues: %d created", len(ISSUES))


def reset():
    for model in (Comment, Media, WorkOrder, Issue, Mapping):
        model.query.delete()
    db.session.commit()
    log.info("Cleared issue data and mappings")


def main():
    parser = argparse.ArgumentParser(description="Seed demo data")
    parser.add_argument("--reset", action="store_true", help="delete existing issues and mappings first")
    args = parser.parse_args()

    app = create_app()
    with app.app_context():
        db.create_all()
        if args.reset:
            reset()
        seed_users()
        seed_mappings()
        seed_issues()
    log.info("Seed complete. Demo password for every account: %s", DEMO_PASSWORD)


if __name__ == "__main__":
    main()
