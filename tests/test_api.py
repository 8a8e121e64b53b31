import pytest
from fastapi.testclient import TestClient

from richtext_converter.api import create_app
from richtext_converter.config import AppConfig, RuntimeConfig


@pytest.fixture()
def client() -> TestClient:
    return TestClient(create_app(AppConfig(runtime=RuntimeConfig(enable_local_api=True))))


def test_disabled_api_refuses_to_start() -> None:
    with pytest.raises(RuntimeError):
        create_app(AppConfig())


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok", "backend": "regex"}


def test_detect(client: TestClient) -> None:
    response = client.post("/detect", json={"text": "<p>Hello</p>"})
    assert response.status_code == 200
    assert response.json()["format"] == "html"


def test_convert(client: TestClient) -> None:
    response = client.post("/convert", json={"text": "# Title\n\nHello **x**", "target": "rtf"})
    assert response.status_code == 200
    payload = response.json()
    assert payload["source"] == "markdown"
    assert payload["validated"] is True
    assert payload["text"].startswith("{\\rtf1")


def test_convert_unknown_format(client: TestClient) -> None:
    response = client.post("/convert", json={"text": "x", "target": "rtf", "source": "docx"})
    assert response.status_code == 400
    assert response.json()["detail"] == "UNSUPPORTED_FORMAT"


def test_validate(client: TestClient) -> None:
    response = client.post("/validate", json={"text": "{\\rtf1\\ansi\\par"})
    assert response.json() == {"is_valid": False, "confidence": 3, "balance_delta": 1}


def test_missing_service_is_unavailable() -> None:
    app = create_app(AppConfig(runtime=RuntimeConfig(enable_local_api=True)))
    app.state.service = None
    response = TestClient(app).post("/detect", json={"text": "x"})
    assert response.status_code == 503
    assert response.json()["detail"] == "SERVICE_UNAVAILABLE"
