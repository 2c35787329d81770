# fleet_repairs/services/settings.py
DEFAULT_SETTINGS = {
    "siteName": "SE Repairs",
    "maintenanceMode": False,
    "allowGuestReports": True,
    "autoArchiveDays": 90,
    "notificationsEnabled": True,
    "emailAlerts": True,
    "syncInterval": 15,
}

_BOOLEAN_FIELDS = ("maintenanceMode", "allowGuestReports", "notificationsEnabled", "emailAlerts")
_RANGES = {
    "autoArchiveDays": (7, 365),
    "syncInterval": (1, 60),
}


def validate_settings(body):
    """
    Partial update check. Returns (clean_values, errors); errors is a list
    of {"field", "message"} and unknown keys are ignored.
    """
    clean, errors = {}, []

    if "siteName" in body:
        name = body["siteName"]
        if not isinstance(name, str) or not name.strip():
            errors.append({"field": "siteName", "message": "siteName must be a non-empty string"})
        else:
            clean["siteName"] = name.strip()

    for field in _BOOLEAN_FIELDS:
        if field in body:
            if isinstance(body[field], bool):
                clean[field] = body[field]
            else:
                errors.append({"field": field, "message": f"{field} must be a boolean"})

    for field, (lo, hi) in _RANGES.items():
        if field in body:
            value = body[field]
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not lo <= value <= hi:
                errors.append({"field": field, "message": f"{field} must be a number between {lo} and {hi}"})
            else:
                clean[field] = value

    return clean, errors


def merge_settings(stored):
    return {**DEFAULT_SETTINGS, **(stored or {})}
