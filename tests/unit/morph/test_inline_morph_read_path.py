import pytest

from inline_morph import db
from inline_morph.constants import OperationKind
from inline_morph.morph import InlineMorphTo


def _content_field():
    from tests.fixtures import resources

    return InlineMorphTo("Content").types([resources.Article, resources.Video])


def _post_with_commented_video():
    from tests.fixtures import models

    video = models.Video(title="Launch", url="https://example.com/launch.mp4", duration=90)
    video.comments = [models.Comment(body="first"), models.Comment(body="second")]
    post = models.Post(headline="Hello")
    db.session.add_all([video, post])
    db.session.flush()
    models.Post.content.associate(post, video)
    db.session.flush()
    return post, video


@pytest.mark.unit
def test_resolve_empty_relation_sets_value_none(app, make_request) -> None:
    from tests.fixtures import models

    field = _content_field()
    post = models.Post(headline="Empty")

    assert field.resolve(post, make_request(OperationKind.DETAIL)) is None
    assert field.value is None


@pytest.mark.unit
def test_detail_resolution_injects_linkage_into_relation_fields(app, make_request) -> None:
    post, video = _post_with_commented_video()
    field = _content_field()
    request = make_request(OperationKind.DETAIL)

    assert field.resolve(post, request) == "video"

    resolved = field.field_sets(request).cached("video", OperationKind.DETAIL)
    nested = {item.attribute: item for item in resolved}
    assert nested["title"].value == "Launch"
    assert nested["duration"].value == 90
    assert nested["comments"].value == [comment.id for comment in video.comments]
    assert nested["comments"].meta["inline_morph"] == {"via_resource_id": video.id, "via_resource": "video"}

    payload = field.serialize(request)
    video_entry = payload["resources"][1]
    comments = next(item for item in video_entry["fields"] if item["attribute"] == "comments")

    assert payload["component"] == "inline-morph-to"
    assert payload["value"] == "video"
    assert payload["listable"] is True
    assert video_entry["identifier"] == "video"
    assert video_entry["class_name"] == "tests.fixtures.resources.Video"
    assert comments["via_resource"] == "video"
    assert comments["via_resource_id"] == video.id
    assert request.route_params == {"resource": "post"}


@pytest.mark.unit
def test_read_path_is_idempotent_and_leaves_entity_untouched(app, make_request) -> None:
    post, video = _post_with_commented_video()
    field = _content_field()
    request = make_request(OperationKind.DETAIL)
    before = (post.content_type, post.content_id, video.title)

    field.resolve(post, request)
    first = field.serialize(request)
    field.resolve(post, request)
    second = field.serialize(request)

    assert first == second
    assert [entry["identifier"] for entry in second["resources"]] == ["article", "video"]
    assert (post.content_type, post.content_id, video.title) == before
    assert not db.session.dirty


@pytest.mark.unit
def test_inactive_candidate_relation_fields_use_scoped_route_resource(app, make_request) -> None:
    from tests.fixtures import models

    field = _content_field()
    request = make_request(OperationKind.DETAIL)
    field.resolve(models.Post(headline="Empty"), request)

    payload = field.serialize(request)
    comments = next(item for item in payload["resources"][1]["fields"] if item["attribute"] == "comments")

    assert comments["via_resource"] == "video"
    assert comments["via_resource_id"] is None
    assert payload["value"] is None
