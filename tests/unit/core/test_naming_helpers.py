import pytest

from inline_morph.utils.naming import convert_to_human_case, short_name, snake_case


@pytest.mark.unit
@pytest.mark.parametrize(
    ("target", "expected"),
    [
        ("BlogPostArticle", "Blog Post Article"),
        ("app.resources.BlogPostArticle", "Blog Post Article"),
        ("video_clip", "Video Clip"),
        ("HTMLPage", "H T M L Page"),
        ("HTMLParser", "H T M L Parser"),
        ("Video2Clip", "Video2 Clip"),
        ("Video", "Video"),
    ],
)
def test_convert_to_human_case(target, expected) -> None:
    assert convert_to_human_case(target) == expected


@pytest.mark.unit
def test_short_name_and_snake_case() -> None:
    class BlogPostArticle:
        pass

    assert short_name(BlogPostArticle) == "BlogPostArticle"
    assert short_name("App\\Nova\\Video") == "Video"
    assert snake_case("BlogPostArticle") == "blog_post_article"
    assert snake_case("Display Name") == "display_name"
    assert snake_case("HTMLPage") == "h_t_m_l_page"
