"""inline-morph-to - 统一配置读取与校验.

所有环境变量在这里读取一次: ``create_app(settings=...)`` 只消费 Settings,
其它模块通过 ``current_app.config`` 取值.本地开发可在项目根目录放置 ``.env``.

生产环境缺少 SECRET_KEY 或 DATABASE_URL 时直接抛出 ValueError;
其它环境分别回退为随机密钥与本地 SQLite 文件.
"""

from __future__ import annotations

import logging
import re
import secrets
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DOTENV_PATH = PROJECT_ROOT / ".env"

APP_NAME = "inline-morph-to"
APP_VERSION = "0.3.0"
DEFAULT_ENVIRONMENT = "development"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_ROUTE_RESOURCE_PARAM = "resource"

_ROUTE_PARAM_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
_TEST_ENVIRONMENTS = frozenset({"testing", "test"})


class Settings(BaseSettings):
    """应用运行时设置."""

    model_config = SettingsConfigDict(
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
        str_strip_whitespace=True,
    )

    environment: str = Field(default=DEFAULT_ENVIRONMENT, validation_alias="FLASK_ENV")
    debug: bool = Field(default=False, validation_alias="FLASK_DEBUG")
    app_name: str = Field(default=APP_NAME, validation_alias="APP_NAME")
    app_version: str = APP_VERSION

    secret_key: str = Field(default="", validation_alias="SECRET_KEY")
    database_url: str = Field(default="", validation_alias="DATABASE_URL")
    sqlalchemy_echo: bool = Field(default=False, validation_alias="SQLALCHEMY_ECHO")

    log_level: str = Field(default=DEFAULT_LOG_LEVEL, validation_alias="LOG_LEVEL")
    enable_debug_log: bool = Field(default=False, validation_alias="ENABLE_DEBUG_LOG")

    # 路由上表示"当前资源"的参数名,多态字段序列化候选类型时会临时改写它
    route_resource_param: str = Field(
        default=DEFAULT_ROUTE_RESOURCE_PARAM,
        validation_alias="MORPH_ROUTE_RESOURCE_PARAM",
    )

    @classmethod
    def load(cls) -> Settings:
        """读取 ``.env``(若存在,不覆盖已有环境变量)后构造 Settings."""
        load_dotenv(dotenv_path=DOTENV_PATH if DOTENV_PATH.exists() else None, override=False)
        return cls()

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def normalized_environment(self) -> str:
        return self.environment.strip().lower()

    @property
    def is_production(self) -> bool:
        return self.normalized_environment == "production"

    @property
    def sqlalchemy_engine_options(self) -> dict[str, object]:
        if self.database_url.startswith("sqlite"):
            return {"connect_args": {"check_same_thread": False}}
        return {"pool_pre_ping": True}

    def to_flask_config(self) -> dict[str, object]:
        """转换为 ``app.config`` 的键值."""
        return {
            "ENV": self.environment,
            "DEBUG": self.debug,
            "APP_NAME": self.app_name,
            "APP_VERSION": self.app_version,
            "SECRET_KEY": self.secret_key,
            "SQLALCHEMY_DATABASE_URI": self.database_url,
            "SQLALCHEMY_TRACK_MODIFICATIONS": False,
            "SQLALCHEMY_ECHO": self.sqlalchemy_echo,
            "SQLALCHEMY_ENGINE_OPTIONS": self.sqlalchemy_engine_options,
            "LOG_LEVEL": self.log_level,
            "ENABLE_DEBUG_LOG": self.enable_debug_log,
            "MORPH_ROUTE_RESOURCE_PARAM": self.route_resource_param,
        }

    @model_validator(mode="after")
    def _fill_defaults(self) -> Settings:
        if "debug" not in self.model_fields_set:
            object.__setattr__(self, "debug", not self.is_production)

        if not self.secret_key:
            if not self.debug:
                raise ValueError("SECRET_KEY environment variable must be set in production")
            object.__setattr__(self, "secret_key", secrets.token_urlsafe(32))
            logger.warning("⚠️  开发环境使用随机生成的SECRET_KEY,生产环境请设置环境变量")

        if not self.database_url:
            if self.is_production:
                raise ValueError("DATABASE_URL environment variable must be set in production")
            db_path = PROJECT_ROOT / "userdata" / "inline_morph_dev.db"
            object.__setattr__(self, "database_url", f"sqlite:///{db_path.absolute()}")
            if self.normalized_environment not in _TEST_ENVIRONMENTS:
                logger.warning("⚠️  未设置 DATABASE_URL, 非 production 环境将回退 SQLite")

        errors = []
        if self.log_level not in _LOG_LEVELS:
            errors.append("LOG_LEVEL 仅支持 DEBUG/INFO/WARNING/ERROR/CRITICAL")
        if not _ROUTE_PARAM_PATTERN.match(self.route_resource_param):
            errors.append("MORPH_ROUTE_RESOURCE_PARAM 必须是合法的路由参数名")
        if errors:
            msg = f"配置校验失败: {'; '.join(errors)}"
            raise ValueError(msg)
        return self
