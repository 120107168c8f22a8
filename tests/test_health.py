def test_health_ok(api):
    resp = api.get("/api/health")

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["environment"] == "test"
    assert body["uptime"] >= 0


def test_health_reports_database_failure(api, db_ping):
    db_ping.state.error = ConnectionError("mongo is down")

    resp = api.get("/api/health")

    assert resp.status_code == 503
    body = resp.json()
    assert body["success"] is False
    assert body["message"] == "Service is unhealthy"
    assert body["error"] == "mongo is down"


def test_database_health(api, db_ping):
    assert api.get("/api/health/db").status_code == 200

    db_ping.state.error = ConnectionError("timeout")
    resp = api.get("/api/health/db")

    assert resp.status_code == 503
    assert resp.json()["message"] == "Database connection failed"


def test_root_welcome(api):
    resp = api.get("/")

    assert resp.status_code == 200
    assert "message" in resp.json()
