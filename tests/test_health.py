from mclaim import create_app


def test_health_ping():
    app = create_app("testing")
    client = app.test_client()

    response = client.get("/health/ping")

    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


def test_health_ready(client):
    body = client.get("/health/ready").get_json()

    assert body["catalog_size"] == 105
    assert body["duplicate_codes"] == []
    assert body["generative_lookup"] is False


def test_openapi_document(client):
    spec = client.get("/docs/openapi.json").get_json()

    assert spec["info"]["title"] == "mClaim INA-CBG API"
    assert "/patients/{patient_id}/diagnoses" in spec["paths"]
    assert "/catalog/import" in spec["paths"]


def test_docs_redirects_to_swagger(client):
    response = client.get("/docs/")

    assert response.status_code == 302
    assert response.headers["Location"].endswith("/docs/swagger")


def test_unknown_route_returns_json(client):
    response = client.get("/does-not-exist")

    assert response.status_code == 404
    assert response.get_json() == {"error": "Not found"}
