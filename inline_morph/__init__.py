"""inline-morph-to - Flask 应用初始化.

管理后台的内联多态关联字段,以及承载它的资源表单接口.
"""

import logging

from flask import Flask, jsonify, request
from flask.typing import ResponseReturnValue
from flask_sqlalchemy import SQLAlchemy

from inline_morph.settings import Settings
from inline_morph.utils.response_utils import unified_error_response
from inline_morph.utils.structlog_config import (
    ErrorContext,
    configure_structlog,
    enhanced_error_handler,
    get_system_logger,
)

# 初始化扩展
db = SQLAlchemy()


def create_app(
    *,
    settings: Settings | None = None,
    register_views: bool = True,
) -> Flask:
    """创建Flask应用实例.

    Args:
        settings: 可选的配置对象,用于测试或多环境启动.
        register_views: 是否注册资源表单接口.

    Returns:
        Flask: Flask应用实例

    """
    resolved_settings = settings or Settings.load()
    app = Flask(__name__)

    # 配置应用
    configure_app(app, resolved_settings)

    # 初始化扩展
    db.init_app(app)

    # 注册蓝图
    if register_views:
        configure_blueprints(app)

    # 配置统一日志系统
    configure_structlog(app)
    configure_request_logging(app)

    # 设置全局日志级别
    log_level_name = str(app.config.get("LOG_LEVEL", "INFO"))
    logging.getLogger().setLevel(getattr(logging, log_level_name, logging.INFO))

    # 注册增强的错误处理器
    app.extensions["enhanced_error_handler"] = enhanced_error_handler

    # 注册全局错误处理器
    @app.errorhandler(Exception)
    def handle_global_exception(error: Exception) -> ResponseReturnValue:
        """全局错误处理."""
        payload, status_code = unified_error_response(error, context=ErrorContext(error, request))
        return jsonify(payload), status_code

    get_system_logger().info(
        "应用初始化完成",
        module="system",
        environment=resolved_settings.environment,
        route_resource_param=resolved_settings.route_resource_param,
    )
    return app


def configure_app(app: Flask, settings: Settings) -> None:
    """写入 Settings 提供的配置.

    Args:
        app: Flask 应用实例.
        settings: 统一配置对象,包含环境变量解析、默认值与校验结果.

    """
    app.config.from_mapping(settings.to_flask_config())
    app.config.setdefault("APPLICATION_ROOT", "/")


def configure_blueprints(app: Flask) -> None:
    """注册资源表单蓝图."""
    from inline_morph.views.resource_form_view import register_resource_views

    register_resource_views(app)


def configure_request_logging(app: Flask) -> None:
    """注册 request_id 注入钩子."""
    from inline_morph.infra.logging.request_middleware import register_request_logging

    register_request_logging(app)
