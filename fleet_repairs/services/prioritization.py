# fleet_repairs/services/prioritization.py
"""
Repair prioritisation score for a reported issue.

The score blends severity, how hard the truck is worked, how critical its
route is, repair complexity and parts availability, then scales by the
driver's experience and the time the issue lands.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List

SEVERITY_WEIGHTS = {"LOW": 10, "MEDIUM": 25, "HIGH": 50, "CRITICAL": 80}
ROUTE_WEIGHTS = {"LOW": 5, "MEDIUM": 15, "HIGH": 25, "CRITICAL": 35}
DRIVER_MULTIPLIERS = {"NOVICE": 1.2, "EXPERIENCED": 1.0, "EXPERT": 0.9}

PEAK = 1.3
BUSINESS = 1.1
OFF_HOURS = 0.8
WEEKEND = 0.7

RECOMMENDED_ACTIONS = {
    "EMERGENCY": "Immediate response required. Dispatch emergency roadside assistance and notify operations manager.",
    "CRITICAL": "Schedule within 2 hours. Prepare replacement vehicle if needed.",
    "HIGH": "Schedule within 4 hours. Coordinate with parts department.",
    "MEDIUM": "Schedule within 24 hours during next available slot.",
    "LOW": "Schedule during next maintenance window or when convenient.",
}


@dataclass(frozen=True)
class PriorityFactors:
    severity: str
    fleet_utilization: float          # 0-100
    route_criticality: str            # LOW / MEDIUM / HIGH / CRITICAL
    historical_repair_time: float     # hours
    parts_available: bool
    driver_experience: str = "EXPERIENCED"
    hour_of_day: int = 12             # 0-23
    day_of_week: int = 1              # 0 = Sunday ... 6 = Saturday


@dataclass
class PriorityScore:
    score: int
    priority: str
    reasoning: List[str] = field(default_factory=list)
    recommended_action: str = ""
    estimated_impact: str = ""

    def to_dict(self):
        return {
            "score": self.score,
            "priority": self.priority,
            "reasoning": list(self.reasoning),
            "recommendedAction": self.recommended_action,
            "estimatedImpact": self.estimated_impact,
        }


def time_multiplier(hour: int, day_of_week: int) -> float:
    if day_of_week in (0, 6):
        return WEEKEND
    if 6 <= hour <= 9 or 16 <= hour <= 19:
        return PEAK
    if 9 <= hour <= 16:
        return BUSINESS
    return OFF_HOURS


def score_to_priority(score: float) -> str:
    if score >= 90:
        return "EMERGENCY"
    if score >= 70:
        return "CRITICAL"
    if score >= 50:
        return "HIGH"
    if score >= 30:
        return "MEDIUM"
    return "LOW"


def route_criticality(fleet_number: str) -> str:
    n = fleet_band_number(fleet_number)
    if n is None:
        return "LOW"
    if 400 <= n < 450:
        return "CRITICAL"
    if 300 <= n < 400:
        return "HIGH"
    if 200 <= n < 300:
        return "MEDIUM"
    return "LOW"


def fleet_band_number(fleet_number):
    """Leading integer of a fleet number ('412' -> 412, '412A' -> 412), else None."""
    digits = ""
    for ch in str(fleet_number or "").strip():
        if not ch.isdigit():
            break
        digits += ch
    return int(digits) if digits else None


def estimated_impact(priority: str, factors: PriorityFactors) -> str:
    utilization_impact = "High fleet impact" if factors.fleet_utilization > 85 else "Moderate fleet impact"
    route_impact = (
        "Critical route disruption" if factors.route_criticality == "CRITICAL" else "Standard route impact"
    )
    if priority == "EMERGENCY":
        return f"Severe operational impact. {utilization_impact}. Immediate revenue loss risk."
    if priority == "CRITICAL":
        return f"Significant operational impact. {route_impact}. Customer service risk."
    if priority == "HIGH":
        return f"Moderate operational impact. {utilization_impact}. Schedule disruption likely."
    if priority == "MEDIUM":
        return "Minor operational impact. Can be managed with current resources."
    return "Minimal operational impact. Preventive maintenance opportunity."


def _signed(n: int) -> str:
    return f"+{n}" if n > 0 else str(n)


def calculate_priority(factors: PriorityFactors) -> PriorityScore:
    reasoning = []

    severity_score = SEVERITY_WEIGHTS[factors.severity] * 0.4
    score = severity_score
    reasoning.append(f"{factors.severity} severity: +{round(severity_score)} points")

    utilization_score = factors.fleet_utilization * 0.2
    score += utilization_score
    if factors.fleet_utilization > 85:
        reasoning.append(
            f"High fleet utilization ({factors.fleet_utilization:g}%): +{round(utilization_score)} points"
        )

    route_score = ROUTE_WEIGHTS[factors.route_criticality] * 0.15
    score += route_score
    if factors.route_criticality != "LOW":
        reasoning.append(f"{factors.route_criticality} route criticality: +{round(route_score)} points")

    if factors.historical_repair_time > 8:
        complexity = min(15, factors.historical_repair_time - 8)
        score += complexity
        reasoning.append(
            f"Complex repair history ({factors.historical_repair_time:g}h avg): +{complexity:g} points"
        )

    if not factors.parts_available:
        score -= 10
        reasoning.append("Parts not available: -10 points")

    driver_multiplier = DRIVER_MULTIPLIERS.get(factors.driver_experience, 1.0)
    if driver_multiplier != 1.0:
        adjustment = round(score * (driver_multiplier - 1))
        score *= driver_multiplier
        reasoning.append(f"{factors.driver_experience} driver: {_signed(adjustment)} points")

    multiplier = time_multiplier(factors.hour_of_day, factors.day_of_week)
    if multiplier != 1.0:
        adjustment = round(score * (multiplier - 1))
        score *= multiplier
        reasoning.append(f"Time factor: {_signed(adjustment)} points")

    priority = score_to_priority(score)
    return PriorityScore(
        score=round(score),
        priority=priority,
        reasoning=reasoning,
        recommended_action=RECOMMENDED_ACTIONS[priority],
        estimated_impact=estimated_impact(priority, factors),
    )
