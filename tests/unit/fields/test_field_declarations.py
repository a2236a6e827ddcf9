import pytest

from inline_morph.constants import OperationKind
from inline_morph.fields import Boolean, FieldOption, HasMany, HasOne, Number, Select, Text, Textarea
from inline_morph.infra.field_request import FieldRequest


class Entity:
    def __init__(self, **values) -> None:
        self.__dict__.update(values)


@pytest.mark.unit
def test_attribute_defaults_to_snake_case_name() -> None:
    assert Text("Display Name").attribute == "display_name"
    assert Text("PublishedAt").attribute == "published_at"
    assert Text("Title", "headline").attribute == "headline"


@pytest.mark.unit
def test_visibility_helpers() -> None:
    field = Text("Title").only_on_forms()
    assert (field.show_on_index, field.show_on_detail, field.show_on_creation) == (False, False, True)

    assert Textarea("Body").show_on_index is False
    assert HasMany("Comments").show_on_creation is False


@pytest.mark.unit
def test_resolve_uses_callback() -> None:
    field = Text("Title", resolve_callback=str.upper)

    assert field.resolve(Entity(title="hello")) == "HELLO"
    assert field.value == "HELLO"


@pytest.mark.unit
def test_fill_skips_unsubmitted_and_readonly_fields() -> None:
    entity = Entity(title="keep", views=1)
    request = FieldRequest(payload={"views": "42"})

    Text("Title").fill(request, entity)
    Number("Views", integer=True).fill(request, entity)
    Number("Views", integer=True).readonly().fill(FieldRequest(payload={"views": "7"}), entity)

    assert entity.title == "keep"
    assert entity.views == 42


@pytest.mark.unit
def test_cast_value_converts_blank_to_none_for_non_text() -> None:
    assert Boolean("Published").cast_value("true") is True
    assert Number("Duration").cast_value("  ") is None
    assert Text("Title").cast_value("") == ""


@pytest.mark.unit
def test_select_rejects_unknown_option_and_serializes_options() -> None:
    field = Select("Status").options([("draft", "草稿"), FieldOption("published", "已发布")])
    rule = field.validation_rules(OperationKind.CREATION)[0]

    rule("draft")
    with pytest.raises(ValueError):
        rule("archived")

    payload = field.serialize(FieldRequest())
    assert payload["component"] == "select-field"
    assert payload["options"][1] == {"value": "published", "label": "已发布"}


@pytest.mark.unit
def test_update_rules_only_apply_to_update() -> None:
    def _rule(value):
        return None

    field = Text("Slug").creation_rules(_rule).update_rules(_rule, _rule)

    assert len(field.validation_rules(OperationKind.CREATION)) == 1
    assert len(field.validation_rules(OperationKind.UPDATE)) == 2


@pytest.mark.unit
def test_serialize_flattens_meta() -> None:
    payload = Text("Title").required().with_meta({"placeholder": "标题"}).serialize(FieldRequest())

    assert payload == {
        "component": "text-field",
        "name": "Title",
        "attribute": "title",
        "value": None,
        "readonly": False,
        "required": True,
        "nullable": False,
        "placeholder": "标题",
    }


@pytest.mark.unit
def test_relation_field_serializes_route_resource_without_linkage(app) -> None:
    from tests.fixtures import resources

    field = HasOne("Cover", resource=resources.Article)
    payload = field.serialize(FieldRequest(route_params={"resource": "post"}))

    assert payload["relation_kind"] == "has_one"
    assert payload["resource_name"] == "article"
    assert payload["via_resource"] == "post"
    assert payload["via_resource_id"] is None


@pytest.mark.unit
def test_relation_field_prefers_linkage(app) -> None:
    field = HasMany("Comments").with_linkage(7, "video")
    payload = field.serialize(FieldRequest(route_params={"resource": "post"}))

    assert payload["via_resource"] == "video"
    assert payload["via_resource_id"] == 7
    assert payload["inline_morph"] == {"via_resource_id": 7, "via_resource": "video"}
