import csv
import io


def _cost(**kw):
    body = {"category": "parts", "description": "Brake pads", "amount": 120.5, "supplier": "Bendix"}
    body.update(kw)
    return body


def test_create_and_totals(ops_client, make_issue):
    issue = make_issue()
    resp = ops_client.post("/api/costs", json=_cost(issueId=issue.id, invoiceNumber="INV-1"))
    assert resp.status_code == 201
    cost = resp.get_json()["cost"]
    assert cost["currency"] == "AUD"
    assert cost["issueId"] == issue.id

    ops_client.post("/api/costs", json=_cost(amount=79.5))
    ops_client.post("/api/costs", json=_cost(category="LABOR", description="2h fitter", amount=180))

    data = ops_client.get("/api/costs").get_json()
    assert data["count"] == 3
    assert data["grandTotal"] == 380.0
    assert data["totals"] == {"parts": {"count": 2, "total": 200.0}, "labor": {"count": 1, "total": 180.0}}

    only_issue = ops_client.get(f"/api/costs?issueId={issue.id}").get_json()
    assert only_issue["count"] == 1
    assert ops_client.get("/api/costs?category=labor").get_json()["grandTotal"] == 180.0


def test_cost_validation(ops_client):
    resp = ops_client.post("/api/costs", json={"category": "snacks", "amount": 0, "issueId": 999})
    assert resp.status_code == 400
    fields = {d["field"] for d in resp.get_json()["details"]}
    assert fields == {"category", "description", "amount", "issueId"}


def test_update_and_delete(ops_client):
    cost = ops_client.post("/api/costs", json=_cost()).get_json()["cost"]
    resp = ops_client.put(f"/api/costs/{cost['id']}", json={"amount": 99, "approvedBy": "Ops Manager"})
    assert resp.status_code == 200
    assert resp.get_json()["cost"]["amount"] == 99.0
    assert resp.get_json()["cost"]["approvedBy"] == "Ops Manager"
    assert ops_client.put(f"/api/costs/{cost['id']}", json={"amount": -1}).status_code == 400

    assert ops_client.delete(f"/api/costs/{cost['id']}").status_code == 200
    assert ops_client.get(f"/api/costs/{cost['id']}").status_code == 404


def test_csv_export(ops_client):
    ops_client.post("/api/costs", json=_cost(description="Pads, front axle"))
    resp = ops_client.get("/api/costs/export")
    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert resp.headers["Content-Disposition"].startswith("attachment;filename=costs_")

    rows = list(csv.reader(io.StringIO(resp.get_data(as_text=True))))
    assert rows[0][:5] == ["id", "createdAt", "category", "description", "amount"]
    assert rows[1][2:5] == ["parts", "Pads, front axle", "120.50"]


def test_costs_are_staff_only(client):
    assert client.get("/api/costs").status_code == 401
    assert client.get("/api/costs/export").status_code == 401
