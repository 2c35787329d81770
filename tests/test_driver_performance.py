def _record(**kw):
    body = {
        "driverName": "John Smith",
        "driverEmail": "john@example.com",
        "fleetNumber": "412",
        "periodStart": "2025-01-01",
        "periodEnd": "2025-01-31",
        "issuesReported": 4,
        "issuesResolved": 3,
        "avgResponseTime": 2.5,
        "safeDrivingScore": 91,
    }
    body.update(kw)
    return body


def test_create_and_stats(ops_client):
    assert ops_client.post("/api/driver-performance", json=_record()).status_code == 201
    ops_client.post("/api/driver-performance", json=_record(
        periodStart="2025-02-01", periodEnd="2025-02-28", issuesReported=2, issuesResolved=2,
        avgResponseTime=1.5, safeDrivingScore=None,
    ))
    ops_client.post("/api/driver-performance", json=_record(driverName="Sarah Jones", fleetNumber="301",
                                                            avgResponseTime=None, safeDrivingScore=85))

    data = ops_client.get("/api/driver-performance").get_json()
    assert data["stats"] == {
        "uniqueDrivers": 2,
        "totalIssuesReported": 10,
        "totalIssuesResolved": 8,
        "avgResponseTime": 2.0,
        "avgSafeDrivingScore": 88.0,
        "totalRecords": 3,
    }
    assert data["records"][0]["periodStart"].startswith("2025-02-01")

    john = ops_client.get("/api/driver-performance", query_string={"driverName": "John Smith"}).get_json()
    assert john["stats"]["totalRecords"] == 2


def test_validation(ops_client):
    resp = ops_client.post("/api/driver-performance", json={"driverEmail": "nope", "issuesReported": -1})
    assert resp.status_code == 400
    fields = {d["field"] for d in resp.get_json()["details"]}
    assert fields == {"driverName", "periodStart", "periodEnd", "driverEmail", "issuesReported"}

    resp = ops_client.post("/api/driver-performance", json=_record(periodEnd="2024-12-01"))
    assert resp.status_code == 400
    assert resp.get_json()["details"][0]["field"] == "periodEnd"


def test_update_and_delete(ops_client):
    record = ops_client.post("/api/driver-performance", json=_record()).get_json()["record"]
    url = f"/api/driver-performance/{record['id']}"

    updated = ops_client.put(url, json={"issuesResolved": 4, "notes": "Good month"}).get_json()["record"]
    assert updated["issuesResolved"] == 4
    assert updated["notes"] == "Good month"
    assert ops_client.put(url, json={"periodStart": "2025-03-01"}).status_code == 400

    assert ops_client.delete(url).status_code == 200
    assert ops_client.get(url).status_code == 404
