def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "pass"
    assert resp.json()["service"] == "restaurant-ordering-service"

def test_liveness(client):
    assert client.get("/health/live").json() == {"status": "alive"}

def test_readiness_checks_database(client):
    resp = client.get("/health/ready")
    assert resp.status_code in [200, 503]
    checks = resp.json()["checks"]
    assert checks["database:connectivity"]["status"] == "pass"

def test_startup_without_migrations(client):
    resp = client.get("/health/startup")
    assert resp.status_code == 200
    assert resp.json()["checks"]["database:migrations"]["status"] == "warn"

def test_metrics(client):
    data = client.get("/metrics").json()
    assert data["service"] == "restaurant-ordering-service"
    assert "uptime_seconds" in data
    assert data["system"]["num_threads"] >= 1
