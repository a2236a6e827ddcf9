"""类名与标识符的命名转换."""

from __future__ import annotations

import re

# 每个大写字母前都断开,连续大写(缩写)会被逐字母拆分
_CAMEL_BOUNDARY = re.compile(r"(?<=[^_])(?=[A-Z])")


def short_name(target: type | str) -> str:
    """去掉模块路径后的类名."""
    name = target if isinstance(target, str) else target.__name__
    return re.split(r"[.\\]", name)[-1]


def snake_case(value: str) -> str:
    """驼峰转下划线: ``BlogPostArticle`` -> ``blog_post_article``, ``HTMLPage`` -> ``h_t_m_l_page``."""
    cleaned = value.strip().replace("-", "_").replace(" ", "_")
    return _CAMEL_BOUNDARY.sub("_", cleaned).lower()


def convert_to_human_case(target: type | str) -> str:
    """将类型短名转换为展示用标题.

    去掉模块路径,拆分驼峰与下划线,逐词首字母大写,下划线替换为空格.

    Example:
        >>> convert_to_human_case("app.resources.BlogPostArticle")
        'Blog Post Article'
        >>> convert_to_human_case("HTMLParser")
        'H T M L Parser'

    """
    words = [word for word in snake_case(short_name(target)).split("_") if word]
    return " ".join(word.capitalize() for word in words)
