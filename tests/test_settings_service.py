from fleet_repairs.services.settings import DEFAULT_SETTINGS, merge_settings, validate_settings


def test_partial_update_keeps_known_fields():
    clean, errors = validate_settings({"siteName": "  Depot  ", "syncInterval": 30, "colour": "blue"})
    assert errors == []
    assert clean == {"siteName": "Depot", "syncInterval": 30}


def test_invalid_values_are_reported_per_field():
    clean, errors = validate_settings({
        "siteName": "",
        "maintenanceMode": "yes",
        "autoArchiveDays": 3,
        "syncInterval": True,
    })
    assert clean == {}
    assert [e["field"] for e in errors] == ["siteName", "maintenanceMode", "autoArchiveDays", "syncInterval"]
    assert errors[2]["message"] == "autoArchiveDays must be a number between 7 and 365"


def test_merge_settings_over_defaults():
    assert merge_settings(None) == DEFAULT_SETTINGS
    assert merge_settings({"emailAlerts": False})["emailAlerts"] is False
    assert merge_settings({"emailAlerts": False})["siteName"] == "SE Repairs"
