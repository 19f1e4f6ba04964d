from apps.api.main import app


def test_versioned_routes_exist():
    paths = {route.path for route in app.routes}
    for path in ("/health", "/activities", "/running-stats", "/trends", "/auth/login", "/metrics"):
        assert path in paths
        assert f"/api{path}" in paths
        assert f"/api/v1{path}" in paths
    assert "/api/session" in paths


def test_openapi_includes_versioned_paths():
    schema = app.openapi()
    paths = schema.get("paths", {})
    assert "/api/v1/health" in paths
    assert "/api/v1/activities" in paths
    assert "/api/v1/trends" in paths


def test_openapi_schema_has_core_components():
    schema = app.openapi()
    assert schema.get("openapi", "").startswith("3.")
    assert schema.get("info", {}).get("title") == "Strava Stats API"
    paths = schema.get("paths", {})
    assert paths
    for path, ops in paths.items():
        assert isinstance(ops, dict)
        assert any(method in ops for method in ("get", "post", "put", "delete", "patch")), path
    components = schema.get("components", {}).get("schemas", {})
    for name in ("ActivitiesResponse", "RunningStatsResponse", "TrendsResponse", "HealthResponse", "SessionResponse"):
        assert name in components


def test_error_envelope_documented_on_data_routes():
    responses = app.openapi()["paths"]["/api/v1/running-stats"]["get"]["responses"]
    assert "429" in responses
    assert responses["429"]["content"]["application/json"]["schema"]["$ref"].endswith("/ErrorResponse")
