import importlib

from fastapi import status
from fastapi.testclient import TestClient
from mangum import Mangum

from downloads_api.adapters.storage import LocalObjectStorage, StorageFactory
from downloads_api.config.settings import Settings
from downloads_api.main import create_app


def test_create_app__builds_storage_from_settings(tmp_path):
    app = create_app(Settings(deployment_mode="local-dev", storage_dir=str(tmp_path)))

    assert isinstance(app.state.storage, LocalObjectStorage)
    assert app.state.storage_error is None


def test_health__degraded_when_storage_fails(monkeypatch):
    def broken_storage(settings):
        raise RuntimeError("no credentials")

    monkeypatch.setattr(StorageFactory, "get_storage", staticmethod(broken_storage))
    client = TestClient(create_app(Settings(deployment_mode="aws-prod")))

    body = client.get("/health").json()

    assert body["status"] == "degraded"
    assert body["ready"] is False
    assert body["components"]["storage"] == "error: no credentials"

    # lookups still answer with an HTML 500 rather than crashing
    response = client.get("/get-download", params={"email": "a@b.c"})
    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR


def test_broad_exception_middleware(tmp_path):
    app = create_app(Settings(deployment_mode="local-dev", storage_dir=str(tmp_path)))

    @app.get("/boom")
    async def boom():
        raise ValueError("kaboom")

    response = TestClient(app, raise_server_exceptions=False).get("/boom")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"detail": "Internal server error"}


def test_lambda_handler_wraps_app(monkeypatch, tmp_path):
    monkeypatch.setenv("DEPLOYMENT_MODE", "local-dev")
    monkeypatch.setenv("STORAGE_DIR", str(tmp_path))

    module = importlib.import_module("downloads_api.lambda_handler")

    assert isinstance(module.handler, Mangum)
    assert module.lambda_handler is module.handler


def test_untagged_routes_get_plain_operation_ids(tmp_path):
    app = create_app(Settings(deployment_mode="local-dev", storage_dir=str(tmp_path)))

    @app.get("/untagged")
    async def untagged():
        return {}

    operation_ids = {
        path: operation["get"]["operationId"]
        for path, operation in app.openapi()["paths"].items()
    }
    assert operation_ids["/untagged"] == "untagged"
    assert operation_ids["/get-download"] == "downloads-get_download"
