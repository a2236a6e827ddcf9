import pytest
from sqlalchemy.exc import IntegrityError

from inline_morph import db
from inline_morph.constants import OperationKind
from inline_morph.errors import FillError, PersistenceError, UnregisteredTypeError, ValidationError
from inline_morph.fields import Text
from inline_morph.morph import InlineMorphTo
from inline_morph.repositories.related_entities_repository import RelatedEntitiesRepository


class RecordingRepository(RelatedEntitiesRepository):
    def __init__(self) -> None:
        self.saved: list[object] = []

    def save(self, entity: object) -> object:
        self.saved.append(entity)
        return super().save(entity)


def _content_field(repository=None):
    from tests.fixtures import resources

    return InlineMorphTo("Content", repository=repository).types([resources.Article, resources.Video])


@pytest.mark.unit
def test_fill_creates_article_and_associates_parent(app, make_request) -> None:
    from tests.fixtures import models

    post = models.Post(headline="Launch")
    request = make_request(
        OperationKind.CREATION,
        payload={"headline": "Launch", "content": "article", "title": "Hello", "body": "World"},
    )

    _content_field().fill(request, post)

    article = db.session.get(models.Article, post.content_id)
    assert article is not None
    assert article.title == "Hello"
    assert article.body == "World"
    assert post.content_type == "article"
    assert post.content is article
    assert db.session.query(models.Video).count() == 0


@pytest.mark.unit
def test_fill_reuses_existing_entity_of_same_type(app, make_request) -> None:
    from tests.fixtures import models

    article = models.Article(title="Old")
    post = models.Post(headline="Launch")
    db.session.add_all([article, post])
    db.session.flush()
    models.Post.content.associate(post, article)

    request = make_request(OperationKind.UPDATE, payload={"content": "article", "title": "New"})
    _content_field().fill(request, post)

    assert post.content_id == article.id
    assert article.title == "New"
    assert db.session.query(models.Article).count() == 1


@pytest.mark.unit
def test_fill_switching_type_creates_new_entity(app, make_request) -> None:
    from tests.fixtures import models

    article = models.Article(title="Old")
    post = models.Post(headline="Launch")
    db.session.add_all([article, post])
    db.session.flush()
    models.Post.content.associate(post, article)

    request = make_request(
        OperationKind.UPDATE,
        payload={"content": "video", "title": "Clip", "url": "https://example.com/clip.mp4", "duration": "30"},
    )
    _content_field().fill(request, post)

    video = post.content
    assert isinstance(video, models.Video)
    assert post.content_type == "video"
    assert video.duration == 30
    assert db.session.get(models.Article, article.id) is not None


@pytest.mark.unit
def test_unknown_identifier_fails_before_persistence(app, make_request) -> None:
    from tests.fixtures import models

    repository = RecordingRepository()
    post = models.Post(headline="Launch")
    request = make_request(OperationKind.CREATION, payload={"content": "podcast", "title": "Hello"})

    with pytest.raises(UnregisteredTypeError):
        _content_field(repository).fill(request, post)

    assert repository.saved == []
    assert post.content_type is None
    assert post.content_id is None


@pytest.mark.unit
def test_missing_identifier_raises_validation_error(app, make_request) -> None:
    from tests.fixtures import models

    request = make_request(OperationKind.CREATION, payload={"content": "  ", "title": "Hello"})

    with pytest.raises(ValidationError) as exc_info:
        _content_field().fill(request, models.Post(headline="Launch"))

    assert exc_info.value.message_key == "MORPH_TYPE_REQUIRED"
    assert exc_info.value.fields == ["content"]


@pytest.mark.unit
def test_failed_validation_never_reaches_persistence(app, make_request) -> None:
    from tests.fixtures import models

    repository = RecordingRepository()
    post = models.Post(headline="Launch")
    request = make_request(
        OperationKind.CREATION,
        payload={"content": "video", "title": "", "url": "ftp://example.com/clip"},
    )

    with pytest.raises(ValidationError) as exc_info:
        _content_field(repository).fill(request, post)

    assert exc_info.value.fields == ["title", "url"]
    assert exc_info.value.status_code == 400
    assert repository.saved == []
    assert post.content_type is None
    assert post.content_id is None
    assert db.session.query(models.Video).count() == 0


@pytest.mark.unit
def test_field_failure_is_wrapped_as_fill_error(monkeypatch, app, make_request) -> None:
    from tests.fixtures import models, resources

    class ExplodingText(Text):
        def fill(self, request, entity):
            raise RuntimeError("disk full")

    monkeypatch.setattr(resources.Article, "fields", lambda self, request: [ExplodingText("Title")])
    repository = RecordingRepository()
    post = models.Post(headline="Launch")
    request = make_request(OperationKind.CREATION, payload={"content": "article", "title": "Hello"})

    with pytest.raises(FillError) as exc_info:
        _content_field(repository).fill(request, post)

    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert repository.saved == []
    assert post.content_type is None


@pytest.mark.unit
def test_storage_rejection_raises_persistence_error(monkeypatch, app, make_request) -> None:
    from tests.fixtures import models, resources

    # title 列非空,去掉必填校验后由数据库拒绝写入
    monkeypatch.setattr(resources.Article, "fields", lambda self, request: [Text("Title")])
    post = models.Post(headline="Launch")
    request = make_request(OperationKind.CREATION, payload={"content": "article", "title": None})

    with pytest.raises(PersistenceError) as exc_info:
        _content_field().fill(request, post)

    assert isinstance(exc_info.value.__cause__, IntegrityError)
    assert post.content_type is None
    assert post.content_id is None


@pytest.mark.unit
def test_readonly_field_does_not_fill(app, make_request) -> None:
    from tests.fixtures import models

    repository = RecordingRepository()
    post = models.Post(headline="Launch")
    request = make_request(OperationKind.CREATION, payload={"content": "article", "title": "Hello"})

    _content_field(repository).readonly().fill(request, post)

    assert repository.saved == []
    assert post.content_type is None
