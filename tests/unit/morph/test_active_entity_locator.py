import pytest

from inline_morph import db
from inline_morph.errors import UnregisteredTypeError
from inline_morph.morph.candidates import TypeRegistry
from inline_morph.morph.locator import ActiveEntityLocator
from inline_morph.resources import ResourceRegistry, resource_registry


def _post_with_video():
    from tests.fixtures import models

    video = models.Video(title="Launch")
    post = models.Post(headline="Hello")
    db.session.add_all([video, post])
    db.session.flush()
    models.Post.content.associate(post, video)
    return post, video


@pytest.mark.unit
def test_locate_returns_none_pair_for_empty_relation(app) -> None:
    from tests.fixtures import models, resources

    registry = TypeRegistry()
    registry.register([resources.Article, resources.Video])

    post = models.Post(headline="Empty")
    assert ActiveEntityLocator(registry, resource_registry).locate(post, "content") == (None, None)


@pytest.mark.unit
def test_locate_returns_related_entity_and_candidate(app) -> None:
    from tests.fixtures import resources

    registry = TypeRegistry()
    registry.register([resources.Article, resources.Video])
    post, video = _post_with_video()

    related, candidate = ActiveEntityLocator(registry, resource_registry).locate(post, "content")

    assert related is video
    assert candidate is registry.require("video")


@pytest.mark.unit
def test_locate_rejects_type_missing_from_candidates(app) -> None:
    from tests.fixtures import resources

    registry = TypeRegistry()
    registry.register([resources.Article])
    post, _video = _post_with_video()

    with pytest.raises(UnregisteredTypeError):
        ActiveEntityLocator(registry, resource_registry).locate(post, "content")


@pytest.mark.unit
def test_locate_rejects_type_unknown_to_type_resolver(app) -> None:
    from tests.fixtures import resources

    registry = TypeRegistry()
    registry.register([resources.Article, resources.Video])
    post, _video = _post_with_video()

    with pytest.raises(UnregisteredTypeError):
        ActiveEntityLocator(registry, ResourceRegistry()).locate(post, "content")
