import pytest

from web_inline.errors import UnknownExtensionError
from web_inline.mime import classify, data_uri, extension_of


@pytest.mark.parametrize(
    "url,expected",
    [
        ("http://h/a/photo.jpg", ("image", "jpeg")),
        ("http://h/a/photo.jpeg", ("image", "jpeg")),
        ("http://h/logo.svg", ("image", "svg+xml")),
        ("http://h/logo.png?v=3", ("image", "png")),
        ("http://h/f.woff2", ("font", "woff2")),
        ("http://h/f.ttf", ("font", "ttf")),
        ("http://h/f.otf", ("font", "otf")),
        ("http://h/extra.css", ("text", "css")),
    ],
)
def test_classify(url, expected):
    assert classify(url) == expected


def test_extension_strips_query():
    assert extension_of("a.woff?#iefix") == "woff"


def test_no_extension():
    with pytest.raises(UnknownExtensionError):
        extension_of("font")


def test_data_uri():
    assert data_uri("image", "png", "AAA=") == "data:image/png;base64,AAA="


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://example.com/img/a.png?v=1.2", ("image", "png")),
        ("https://example.com/fonts/font.svg#icons", ("image", "svg+xml")),
        ("https://cdn.example.co.uk/f/x.woff2?v=4.7.0#iefix", ("font", "woff2")),
    ],
)
def test_classify_ignores_host_query_and_fragment(url, expected):
    assert classify(url) == expected


@pytest.mark.parametrize(
    "url",
    [
        "https://example.com/fonts/icon",
        "https://example.com/",
        "https://example.com/dir.v2/icon?x=a.png",
    ],
)
def test_dotted_host_without_path_extension(url):
    with pytest.raises(UnknownExtensionError):
        classify(url)
