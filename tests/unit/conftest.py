# tests/unit/conftest.py
"""单元测试专用 fixtures.

提供内存 SQLite 上的 Flask 应用、测试模型与资源.
"""

import pytest

from inline_morph import create_app, db
from inline_morph.constants import OperationKind
from inline_morph.infra.field_request import FieldRequest
from inline_morph.settings import Settings


@pytest.fixture(autouse=True)
def _unit_test_env(monkeypatch):
    """为 unit tests 强制注入隔离环境变量.

    避免开发者本机环境变量与 `.env` 影响测试稳定性.
    """
    monkeypatch.setenv("FLASK_ENV", "testing")
    monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")
    monkeypatch.setenv("SECRET_KEY", "test-secret-key")
    monkeypatch.delenv("MORPH_ROUTE_RESOURCE_PARAM", raising=False)
    monkeypatch.delenv("ENABLE_DEBUG_LOG", raising=False)


@pytest.fixture
def app():
    # 导入即注册模型与资源
    from tests.fixtures import models, resources  # noqa: F401

    app = create_app(settings=Settings.load())
    app.config["TESTING"] = True
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_request():
    """构造 FieldRequest,默认路由上的当前资源为 post."""

    def _make(operation=OperationKind.GENERIC, payload=None, route_params=None):
        params = {"resource": "post"} if route_params is None else route_params
        return FieldRequest(operation=operation, payload=dict(payload or {}), route_params=params)

    return _make
