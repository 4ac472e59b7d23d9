"""HTTP surface: routes, status codes, payload shapes."""

from tests.conftest import POTHOLE


def _close(client, report_id, password):
    return client.request("DELETE", f"/api/reports/{report_id}", json={"password": password})


def _assert_no_secrets(payload):
    text = str(payload)
    assert "password" not in text
    assert "secret123" not in text


def test_health_and_root(client):
    assert client.get("/health").json()["status"] == "ok"
    root = client.get("/").json()
    assert root["name"] == "Report Desk"
    assert root["health"] == "/health"


def test_report_lifecycle_scenario(client):
    # 1. submit
    resp = client.post("/api/reports", json=POTHOLE)
    assert resp.status_code == 200
    report = resp.json()
    assert report["status"] == "open"
    assert report["id"]
    assert report["createdAt"]
    _assert_no_secrets(report)
    report_id = report["id"]

    # 2. listed
    listing = client.get("/api/reports")
    assert listing.status_code == 200
    assert [r["id"] for r in listing.json()["reports"]] == [report_id]
    _assert_no_secrets(listing.json())

    # 3. wrong password
    resp = _close(client, report_id, "wrongpass")
    assert resp.status_code == 401
    assert resp.json()["error"]["name"] == "Unauthorized"
    assert [r["id"] for r in client.get("/api/reports").json()["reports"]] == [report_id]

    # 4. right password
    resp = _close(client, report_id, "secret123")
    assert resp.status_code == 200
    assert resp.json()["status"] == "closed"
    assert resp.json()["closedAt"]
    _assert_no_secrets(resp.json())
    assert client.get("/api/reports").json() == {"reports": []}

    # second close is rejected
    resp = _close(client, report_id, "secret123")
    assert resp.status_code == 409
    assert resp.json()["error"]["name"] == "InvalidState"

    # 5. comment on closed report
    resp = client.post(f"/api/reports/{report_id}/comments", json={"body": "Fixed now"})
    assert resp.status_code == 200
    comment = resp.json()
    assert comment["reportId"] == report_id
    assert comment["body"] == "Fixed now"
    assert comment["id"]
    _assert_no_secrets(comment)

    # 6. comment on missing report
    resp = client.post("/api/reports/nonexistent-id/comments", json={"body": "x"})
    assert resp.status_code == 404
    error = resp.json()["error"]
    assert error["name"] == "NotFound"
    assert error["code"] == "REPORT_001"


def test_comment_extra_fields_round_trip(client):
    report_id = client.post("/api/reports", json=POTHOLE).json()["id"]

    comment = client.post(
        f"/api/reports/{report_id}/comments",
        json={"body": "Cones placed", "author": "road crew"},
    ).json()
    assert comment["author"] == "road crew"

    [listed] = client.get("/api/reports").json()["reports"]
    assert listed["comments"][0]["author"] == "road crew"


def test_submit_report_missing_fields(client):
    resp = client.post("/api/reports", json={"title": "Pothole"})
    assert resp.status_code == 400
    error = resp.json()["error"]
    assert error["name"] == "ValidationFailure"
    assert error["details"]["fields"] == ["description", "location", "password"]
    assert client.get("/api/reports").json() == {"reports": []}


def test_malformed_body_is_validation_failure(client):
    resp = client.post(
        "/api/reports",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["name"] == "ValidationFailure"


def test_close_missing_report(client):
    resp = _close(client, "nonexistent-id", "secret123")
    assert resp.status_code == 404


def test_close_without_password(client):
    report_id = client.post("/api/reports", json=POTHOLE).json()["id"]
    resp = client.request("DELETE", f"/api/reports/{report_id}", json={})
    assert resp.status_code == 400
    assert resp.json()["error"]["details"]["fields"] == ["password"]


def test_unencodable_text_is_validation_failure(client):
    # "\ud800" is a lone surrogate: valid JSON, not valid UTF-8
    resp = client.post(
        "/api/reports",
        content=b'{"title": "Pothole", "description": "Large pothole", "location": "Main St", "password": "\\ud800"}',
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    error = resp.json()["error"]
    assert error["name"] == "ValidationFailure"
    assert error["details"]["fields"] == ["password"]
    assert client.get("/api/reports").json() == {"reports": []}

    report_id = client.post("/api/reports", json=POTHOLE).json()["id"]
    resp = client.post(
        f"/api/reports/{report_id}/comments",
        content=b'{"body": "x\\udfff"}',
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["details"]["fields"] == ["body"]
