import pytest

from inline_morph import db
from inline_morph.errors import ConfigurationError, UnregisteredTypeError
from inline_morph.models.morph import MorphMap, MorphTo, morph_relation


@pytest.mark.unit
def test_associate_writes_type_and_id_columns(app) -> None:
    from tests.fixtures import models

    video = models.Video(title="Clip")
    db.session.add(video)
    db.session.flush()
    post = models.Post(headline="Hello")

    post.content = video

    assert (post.content_type, post.content_id) == ("video", video.id)
    assert post.content is video


@pytest.mark.unit
def test_load_reads_related_entity_from_session(app) -> None:
    from tests.fixtures import models

    article = models.Article(title="Stored")
    db.session.add(article)
    db.session.flush()
    post = models.Post(headline="Hello", content_type="article", content_id=article.id)

    assert post.content is article


@pytest.mark.unit
def test_dissociate_clears_columns(app) -> None:
    from tests.fixtures import models

    article = models.Article(title="Stored")
    db.session.add(article)
    db.session.flush()
    post = models.Post(headline="Hello")
    post.content = article

    post.content = None

    assert (post.content_type, post.content_id) == (None, None)
    assert post.content is None


@pytest.mark.unit
def test_associate_requires_persisted_entity(app) -> None:
    from tests.fixtures import models

    with pytest.raises(ConfigurationError):
        models.Post.content.associate(models.Post(headline="Hello"), models.Article(title="Draft"))


@pytest.mark.unit
def test_unknown_type_key_raises(app) -> None:
    from tests.fixtures import models

    post = models.Post(headline="Hello", content_type="podcast", content_id=1)

    with pytest.raises(UnregisteredTypeError):
        _ = post.content


@pytest.mark.unit
def test_morph_map_defaults_to_table_name_and_rejects_conflicts() -> None:
    class Podcast:
        __tablename__ = "podcasts"

    class Other:
        pass

    morph_map = MorphMap()

    assert morph_map.key_for(Podcast) == "podcasts"
    assert morph_map.model_for("podcasts") is Podcast
    with pytest.raises(ConfigurationError):
        morph_map.register(Other, "podcasts")


@pytest.mark.unit
def test_morph_relation_lookup(app) -> None:
    from tests.fixtures import models

    relation = morph_relation(models.Post, "content")

    assert isinstance(relation, MorphTo)
    assert (relation.type_attribute, relation.id_attribute) == ("content_type", "content_id")
    assert morph_relation(models.Post, "headline") is None
