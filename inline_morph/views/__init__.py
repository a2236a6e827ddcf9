"""视图层."""

from .resource_form_view import (
    ResourceFieldsView,
    ResourceFormView,
    create_resource_blueprint,
    register_resource_views,
)

__all__ = ["ResourceFieldsView", "ResourceFormView", "create_resource_blueprint", "register_resource_views"]
