import pytest

from inline_morph import db
from inline_morph.errors import AppError, ValidationError
from inline_morph.utils import route_safety


@pytest.fixture
def captured(app, monkeypatch):
    records: list[tuple[str, str, dict[str, object]]] = []

    def _fake_log_with_context(level, event, *, module, action, **options):
        records.append((level, event, {"module": module, "action": action, **options}))

    monkeypatch.setattr(route_safety, "log_with_context", _fake_log_with_context)
    return records


@pytest.mark.unit
def test_safe_route_call_returns_result(captured) -> None:
    result = route_safety.safe_route_call(
        lambda value: value * 2,
        module="resource_forms",
        action="post_detail",
        public_error="加载失败",
        func_args=(21,),
    )

    assert result == 42
    assert captured == []


@pytest.mark.unit
def test_safe_route_call_reraises_app_errors_with_warning(captured) -> None:
    def _fail():
        raise ValidationError("标题必填")

    with pytest.raises(ValidationError):
        route_safety.safe_route_call(_fail, module="resource_forms", action="post_form_create", public_error="保存失败")

    level, event, payload = captured[0]
    assert level == "warning"
    assert event == "post_form_create执行失败"
    assert payload["extra"]["error_type"] == "ValidationError"


@pytest.mark.unit
def test_safe_route_call_wraps_unexpected_errors(captured) -> None:
    def _fail():
        raise KeyError("title")

    with pytest.raises(AppError) as exc_info:
        route_safety.safe_route_call(
            _fail,
            module="resource_forms",
            action="post_form_create",
            public_error="保存失败",
            context={"resource": "post"},
        )

    assert exc_info.value.message == "保存失败"
    assert isinstance(exc_info.value.__cause__, KeyError)
    level, _event, payload = captured[0]
    assert level == "error"
    assert payload["context"] == {"resource": "post"}
    assert payload["extra"]["unexpected"] is True


@pytest.mark.unit
def test_safe_route_call_commits_on_success(captured) -> None:
    from tests.fixtures import models

    def _create():
        article = models.Article(title="Kept")
        db.session.add(article)
        db.session.flush()
        return article.id

    article_id = route_safety.safe_route_call(
        _create,
        module="resource_forms",
        action="article_form_create",
        public_error="保存失败",
    )
    db.session.rollback()

    assert db.session.get(models.Article, article_id).title == "Kept"


@pytest.mark.unit
def test_safe_route_call_rolls_back_flushed_rows_on_failure(captured) -> None:
    from tests.fixtures import models

    def _create_then_fail():
        db.session.add(models.Article(title="Orphan"))
        db.session.flush()
        raise ValidationError("标题必填")

    with pytest.raises(ValidationError):
        route_safety.safe_route_call(
            _create_then_fail,
            module="resource_forms",
            action="article_form_create",
            public_error="保存失败",
        )

    assert db.session.query(models.Article).count() == 0
