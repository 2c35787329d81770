from fleet_repairs.services.prioritization import (
    PriorityFactors,
    calculate_priority,
    fleet_band_number,
    route_criticality,
    score_to_priority,
    time_multiplier,
)


def _factors(**kw):
    fields = dict(
        severity="MEDIUM",
        fleet_utilization=75,
        route_criticality="LOW",
        historical_repair_time=2,
        parts_available=True,
        driver_experience="EXPERIENCED",
        hour_of_day=12,
        day_of_week=3,
    )
    fields.update(kw)
    return PriorityFactors(**fields)


def test_time_multiplier_windows():
    assert time_multiplier(12, 0) == 0.7   # Sunday
    assert time_multiplier(12, 6) == 0.7   # Saturday
    assert time_multiplier(7, 2) == 1.3
    assert time_multiplier(17, 2) == 1.3
    assert time_multiplier(12, 2) == 1.1
    assert time_multiplier(23, 2) == 0.8


def test_score_thresholds():
    assert score_to_priority(90) == "EMERGENCY"
    assert score_to_priority(70) == "CRITICAL"
    assert score_to_priority(50) == "HIGH"
    assert score_to_priority(30) == "MEDIUM"
    assert score_to_priority(29.9) == "LOW"


def test_fleet_bands():
    assert fleet_band_number("412A") == 412
    assert fleet_band_number("T412") is None
    assert route_criticality("420") == "CRITICAL"
    assert route_criticality("350") == "HIGH"
    assert route_criticality("250") == "MEDIUM"
    assert route_criticality("150") == "LOW"
    assert route_criticality("460") == "LOW"


def test_medium_issue_during_business_hours():
    # 25*0.4 + 75*0.2 + 5*0.15 = 25.75, x1.1 business hours = 28.325
    result = calculate_priority(_factors())
    assert result.score == 28
    assert result.priority == "LOW"
    assert result.reasoning[0] == "MEDIUM severity: +10 points"
    assert result.reasoning[-1] == "Time factor: +3 points"


def test_critical_issue_on_critical_route_at_peak():
    # 80*0.4 + 92*0.2 + 35*0.15 = 55.65, +4 complexity = 59.65, x1.2 novice = 71.58, x1.3 peak = 93.054
    result = calculate_priority(_factors(
        severity="CRITICAL", fleet_utilization=92, route_criticality="CRITICAL",
        historical_repair_time=12, driver_experience="NOVICE", hour_of_day=7,
    ))
    assert result.score == 93
    assert result.priority == "EMERGENCY"
    assert "High fleet utilization (92%): +18 points" in result.reasoning
    assert "CRITICAL route criticality: +5 points" in result.reasoning
    assert "Complex repair history (12h avg): +4 points" in result.reasoning
    assert result.recommended_action.startswith("Immediate response required")
    assert result.estimated_impact.startswith("Severe operational impact. High fleet impact")


def test_missing_parts_lower_the_score():
    with_parts = calculate_priority(_factors(severity="HIGH"))
    without_parts = calculate_priority(_factors(severity="HIGH", parts_available=False))
    assert without_parts.score < with_parts.score
    assert "Parts not available: -10 points" in without_parts.reasoning


def test_complexity_bonus_is_capped():
    result = calculate_priority(_factors(historical_repair_time=40, day_of_week=0))
    assert "Complex repair history (40h avg): +15 points" in result.reasoning
