# fleet_repairs/services/form_validation.py
"""Validation and input hints for the driver issue-report form."""
from __future__ import annotations
import re
from typing import Optional, Sequence

MAX_FILE_SIZE_MB = 10
ALLOWED_UPLOAD_TYPES = (
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/webp",
    "video/mp4",
    "video/quicktime",
)

DEFAULT_DESCRIPTION_MIN = 10

_PHONE_RE = re.compile(r"^(?:0\d{9}|\+61\d{9})$")

_SEVERITY_KEYWORDS = (
    ("CRITICAL", ("stopped", "won't start", "wont start", "can't drive", "cant drive", "unsafe",
                  "broke down", "broken down", "smoke", "fire", "no brakes", "leaking fuel")),
    ("HIGH", ("brake", "steering", "warning light", "check engine", "overheating", "overheat",
              "leak", "grinding")),
    ("MEDIUM", ("noise", "vibration", "vibrating", "smell", "rattle", "squeak", "intermittent")),
)

_CATEGORY_KEYWORDS = (
    ("Electrical", ("warning light", "battery", "alternator", "wiring", "fuse", "headlight",
                    "indicator", "light")),
    ("Brakes", ("brake", "braking", "abs")),
    ("Tyres", ("tyre", "tire", "wheel", "puncture", "tread")),
    ("Body", ("door", "panel", "mirror", "window", "bumper", "dent", "scratch")),
    ("Mechanical", ("engine", "won't start", "wont start", "motor", "clutch", "transmission",
                    "gearbox", "oil", "coolant", "radiator", "exhaust")),
)

_UNSAVED_FIELDS = ("fleetNumber", "category", "description", "severity", "driverName",
                   "driverPhone", "location")


def is_valid_phone(value: Optional[str]) -> bool:
    """Empty is fine (the field is optional); otherwise 10 digits or +61 and 9 digits."""
    if value is None:
        return True
    compact = re.sub(r"\s+", "", str(value))
    if not compact:
        return True
    return bool(_PHONE_RE.match(compact))


def is_valid_fleet_number(value: Optional[str]) -> bool:
    return bool(value and str(value).strip())


def description_error(description: Optional[str], min_length: int = DEFAULT_DESCRIPTION_MIN) -> Optional[str]:
    text = (description or "").strip()
    if not text:
        return "Description is required"
    if len(text) < min_length:
        remaining = min_length - len(text)
        return f"Add {remaining} more character{'s' if remaining != 1 else ''}"
    return None


def format_registration(value: Optional[str]) -> str:
    return re.sub(r"[^A-Z0-9]", "", (value or "").upper())


def format_phone_number(value: Optional[str]) -> str:
    digits = re.sub(r"\D", "", value or "")
    if len(digits) > 10:
        return digits[:10]
    if len(digits) <= 4:
        return digits
    if len(digits) <= 7:
        return f"{digits[:4]} {digits[4:]}"
    return f"{digits[:4]} {digits[4:7]} {digits[7:]}"


def _first_match(text: str, table) -> Optional[str]:
    lowered = (text or "").lower()
    if not lowered.strip():
        return None
    for label, keywords in table:
        if any(k in lowered for k in keywords):
            return label
    return None


def detect_severity(description: Optional[str]) -> Optional[str]:
    return _first_match(description, _SEVERITY_KEYWORDS)


def suggest_category(description: Optional[str]) -> Optional[str]:
    return _first_match(description, _CATEGORY_KEYWORDS)


def validate_file(size_bytes: int, content_type: Optional[str],
                  max_size_mb: float = MAX_FILE_SIZE_MB,
                  allowed_types: Sequence[str] = ALLOWED_UPLOAD_TYPES) -> Optional[str]:
    """Returns an error message, or None when the file is acceptable."""
    size_mb = size_bytes / (1024 * 1024)
    if size_mb > max_size_mb:
        return f"File is too large ({size_mb:.1f}MB). Maximum size is {max_size_mb:g}MB"
    if (content_type or "").lower() not in allowed_types:
        return f"Invalid file type ({content_type or 'unknown'}). Allowed: {', '.join(allowed_types)}"
    return None


def has_unsaved_changes(form_data: dict, saved_data: Optional[dict]) -> bool:
    if not saved_data:
        return False
    return any(form_data.get(f) != saved_data.get(f) for f in _UNSAVED_FIELDS)
