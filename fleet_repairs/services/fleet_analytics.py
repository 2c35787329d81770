# fleet_repairs/services/fleet_analytics.py
from __future__ import annotations
from datetime import datetime, timedelta
from statistics import mean, median
from typing import Iterable, List, Optional, Tuple

from fleet_repairs.services.prioritization import fleet_band_number
from fleet_repairs.utils.parsing import as_utc

# hours by category and severity when there is no repair history to go on
BASE_REPAIR_HOURS = {
    "Engine": {"LOW": 2, "MEDIUM": 4, "HIGH": 8, "CRITICAL": 12},
    "Brakes": {"LOW": 1, "MEDIUM": 2, "HIGH": 4, "CRITICAL": 6},
    "Transmission": {"LOW": 3, "MEDIUM": 6, "HIGH": 12, "CRITICAL": 24},
    "Electrical": {"LOW": 0.5, "MEDIUM": 1, "HIGH": 3, "CRITICAL": 6},
    "Suspension": {"LOW": 2, "MEDIUM": 3, "HIGH": 6, "CRITICAL": 8},
    "Tires": {"LOW": 0.5, "MEDIUM": 1, "HIGH": 2, "CRITICAL": 3},
    "Body": {"LOW": 1, "MEDIUM": 2, "HIGH": 4, "CRITICAL": 8},
    "Other": {"LOW": 1, "MEDIUM": 2, "HIGH": 4, "CRITICAL": 6},
}

# report-form spellings of the categories the tables are keyed by
CATEGORY_ALIASES = {"Tyres": "Tires"}

CATEGORY_INVENTORY = {
    "Engine": {
        "available": True, "stock": 15, "leadTime": "2-4 hours", "supplier": "Cummins Parts",
        "estimatedCost": 850, "commonParts": ["Oil Filter", "Air Filter", "Fuel Filter", "Belts"],
        "orderRequired": False, "alternativeSupplier": None,
    },
    "Brakes": {
        "available": True, "stock": 8, "leadTime": "1-2 hours", "supplier": "Bendix Brake Parts",
        "estimatedCost": 450, "commonParts": ["Brake Pads", "Brake Discs", "Brake Fluid", "Air Lines"],
        "orderRequired": False, "alternativeSupplier": None,
    },
    "Transmission": {
        "available": False, "stock": 0, "leadTime": "24-48 hours", "supplier": "Allison Transmission",
        "estimatedCost": 1200, "commonParts": ["Transmission Fluid", "Filter Kit", "Gasket Set"],
        "orderRequired": True, "alternativeSupplier": "Interstate Parts - 3-5 days",
    },
    "Electrical": {
        "available": True, "stock": 25, "leadTime": "30 minutes", "supplier": "Auto Electric Supply",
        "estimatedCost": 120, "commonParts": ["Fuses", "Relays", "Wiring Harness", "Bulbs"],
        "orderRequired": False, "alternativeSupplier": None,
    },
    "Suspension": {
        "available": True, "stock": 6, "leadTime": "2-3 hours", "supplier": "Monroe Suspension",
        "estimatedCost": 680, "commonParts": ["Shock Absorbers", "Springs", "Bushings", "Ball Joints"],
        "orderRequired": False, "alternativeSupplier": None,
    },
    "Tires": {
        "available": True, "stock": 12, "leadTime": "1 hour", "supplier": "Bridgestone Commercial",
        "estimatedCost": 320,
        "commonParts": ["Tire 295/75R22.5", "Tire 385/65R22.5", "Valve Stems", "Wheel Weights"],
        "orderRequired": False, "alternativeSupplier": None,
    },
    "Body": {
        "available": True, "stock": 20, "leadTime": "1-4 hours", "supplier": "Commercial Body Parts",
        "estimatedCost": 200, "commonParts": ["Mirrors", "Lights", "Door Handles", "Trim Pieces"],
        "orderRequired": False, "alternativeSupplier": None,
    },
    "Other": {
        "available": True, "stock": 50, "leadTime": "1-2 hours", "supplier": "General Parts Supply",
        "estimatedCost": 150, "commonParts": ["Fluids", "Filters", "Hardware", "Cleaning Supplies"],
        "orderRequired": False, "alternativeSupplier": None,
    },
}


def fleet_utilization(fleet_number: str) -> dict:
    """Deterministic utilisation profile from the fleet number band."""
    n = fleet_band_number(fleet_number)
    if n is not None and 400 <= n < 450:
        utilization = 92
    elif n is not None and 300 <= n < 400:
        utilization = 88
    elif n is not None and 200 <= n < 300:
        utilization = 85
    else:
        utilization = 75

    if n is None:
        category = "LOCAL"
    elif n >= 400:
        category = "EXPRESS"
    elif n >= 300:
        category = "PRIORITY"
    elif n >= 200:
        category = "STANDARD"
    else:
        category = "LOCAL"

    return {
        "fleetNumber": fleet_number,
        "utilization": utilization,
        "category": category,
        "metrics": {
            "hoursActive": round(utilization * 0.24),
            "milesPerDay": round(utilization * 5),
            "routeEfficiency": round(utilization * 0.95),
        },
    }


def canonical_category(category: Optional[str]) -> Optional[str]:
    return CATEGORY_ALIASES.get(category, category)


def base_repair_hours(category: Optional[str], severity: Optional[str]) -> float:
    table = BASE_REPAIR_HOURS.get(canonical_category(category) or "Other", BASE_REPAIR_HOURS["Other"])
    return table.get(severity or "MEDIUM", table["MEDIUM"])


def repair_hours(created_at: datetime, completed_at: datetime) -> float:
    return (as_utc(completed_at) - as_utc(created_at)).total_seconds() / 3600.0


def repair_time_stats(samples: List[Tuple[datetime, datetime]], category: str, severity: str,
                      now: datetime, weeks: int = 10) -> dict:
    """
    samples: (created_at, completed_at) pairs of completed issues.
    Falls back to the base table when there is no history.
    """
    hours = [h for h in (repair_hours(c, d) for c, d in samples) if h >= 0]
    baseline = base_repair_hours(category, severity)

    if hours:
        avg = mean(hours)
        med = median(hours)
        lo, hi = min(hours), max(hours)
        source = "history"
    else:
        avg = float(baseline)
        med, lo, hi = avg * 0.9, avg * 0.5, avg * 1.8
        source = "baseline"

    historical = _weekly_buckets(samples, now, weeks)
    trend = _trend(historical)
    confidence = min(0.95, 0.5 + len(hours) / 100.0) if hours else 0.5

    return {
        "category": category,
        "severity": severity,
        "averageHours": round(avg, 1),
        "medianHours": round(med, 1),
        "minHours": round(lo, 1),
        "maxHours": round(hi, 1),
        "sampleSize": len(hours),
        "confidence": round(confidence, 2),
        "trend": trend,
        "source": source,
        "historicalData": historical,
        "insights": [
            f"{category} repairs typically take {round(avg)} hours",
            f"{severity} severity issues average {round(avg)} hours",
            "Sufficient historical data available" if len(hours) > 5 else "Limited historical data",
        ],
    }


def _weekly_buckets(samples: Iterable[Tuple[datetime, datetime]], now: datetime, weeks: int) -> List[dict]:
    now = as_utc(now)
    buckets = []
    for i in range(weeks - 1, -1, -1):
        end = now - timedelta(days=7 * i)
        start = end - timedelta(days=7)
        in_week = [repair_hours(c, d) for c, d in samples if start < as_utc(d) <= end]
        buckets.append({
            "date": end.date().isoformat(),
            "hours": round(mean(in_week), 1) if in_week else None,
            "issueCount": len(in_week),
        })
    return buckets


def _trend(buckets: List[dict]) -> str:
    values = [b["hours"] for b in buckets if b["hours"] is not None]
    if len(values) < 2:
        return "stable"
    half = len(values) // 2
    older, recent = mean(values[:half]), mean(values[half:])
    if recent < older * 0.95:
        return "improving"
    if recent > older * 1.05:
        return "worsening"
    return "stable"


def category_inventory(category: str) -> Optional[dict]:
    category = canonical_category(category)
    inventory = CATEGORY_INVENTORY.get(category)
    if inventory is None:
        return None
    if inventory["available"]:
        recommendations = [f"{inventory['commonParts'][0]} in stock", "Ready for immediate repair"]
    else:
        recommendations = [
            f"Order required from {inventory['supplier']}",
            f"Consider alternative: {inventory['alternativeSupplier'] or 'Contact parts manager'}",
        ]
    return {"category": category, **inventory, "recommendations": recommendations}


def fleet_inventory(fleet_number: str) -> dict:
    n = fleet_band_number(fleet_number)
    high_priority = n is not None and n >= 400
    return {
        "available": True,
        "fleetNumber": fleet_number,
        "priorityLevel": "HIGH" if high_priority else "STANDARD",
        "commonIssues": ["Brake maintenance due", "Oil change recommended", "Tire rotation needed"],
        "partsOnHand": 95 if high_priority else 85,
        "estimatedRepairTime": "2-3 hours" if high_priority else "3-4 hours",
    }


def general_inventory() -> dict:
    return {
        "available": True,
        "message": "General parts availability check",
        "overallStock": 85,
        "categories": list(CATEGORY_INVENTORY.keys()),
        "recommendations": [
            "Most common parts in stock",
            "Emergency parts available 24/7",
            "Special orders typically 24-48 hours",
        ],
    }


def parts_available(category: Optional[str]) -> bool:
    inventory = CATEGORY_INVENTORY.get(category or "")
    return inventory["available"] if inventory else True
