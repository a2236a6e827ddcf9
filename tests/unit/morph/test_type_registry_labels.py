import pytest

from inline_morph.errors import ConfigurationError, UnregisteredTypeError
from inline_morph.morph.candidates import TypeRegistry
from inline_morph.resources import Resource


class BlogPostArticle(Resource):
    def fields(self, request):
        return []


class PodcastEpisode(Resource):
    uri_key_name = "podcast"

    def fields(self, request):
        return []


@pytest.mark.unit
def test_register_list_derives_human_case_labels_in_order() -> None:
    registry = TypeRegistry()
    registry.register([BlogPostArticle, PodcastEpisode])

    assert [candidate.label for candidate in registry] == ["Blog Post Article", "Podcast Episode"]
    assert registry.identifiers() == ["blog_post_article", "podcast"]


@pytest.mark.unit
def test_register_mapping_keeps_labels_verbatim() -> None:
    registry = TypeRegistry()
    registry.register({"长文 / Blog": BlogPostArticle, "podcast_show": PodcastEpisode})

    assert [candidate.label for candidate in registry] == ["长文 / Blog", "podcast_show"]
    assert registry.require("podcast").resource_class is PodcastEpisode


@pytest.mark.unit
def test_register_rejects_duplicate_identifier_and_keeps_previous_state() -> None:
    registry = TypeRegistry()
    registry.register([PodcastEpisode])

    with pytest.raises(ConfigurationError) as exc_info:
        registry.register([BlogPostArticle, PodcastEpisode])

    assert exc_info.value.message_key == "DUPLICATE_TYPE_IDENTIFIER"
    assert registry.identifiers() == ["podcast"]


@pytest.mark.unit
def test_register_rejects_non_resource_entries() -> None:
    with pytest.raises(ConfigurationError):
        TypeRegistry().register([object])


@pytest.mark.unit
def test_register_rejects_blank_identifier() -> None:
    class Blank(Resource):
        uri_key_name = "   "

    with pytest.raises(ConfigurationError):
        TypeRegistry().register([Blank])


@pytest.mark.unit
def test_require_unknown_identifier_raises_unregistered_type() -> None:
    registry = TypeRegistry()
    registry.register([BlogPostArticle])

    assert registry.get("podcast") is None
    with pytest.raises(UnregisteredTypeError) as exc_info:
        registry.require("podcast")
    assert exc_info.value.status_code == 422
