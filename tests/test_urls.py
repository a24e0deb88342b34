from urls import clean_url, extract_urls, host_of, is_shortened, strip_trailing_punctuation, url_key


def test_clean_url_strips_tracking_params():
    raw = "https://example.com/path?utm_source=tldr&id=123&gclid=AAA#section"
    assert clean_url(raw) == "https://example.com/path?id=123#section"


def test_clean_url_is_case_insensitive_on_keys():
    assert clean_url("https://example.com/a?UTM_Source=x&FBCLID=1") == "https://example.com/a"


def test_clean_url_keeps_order_and_encoding():
    raw = "https://example.com/search?q=a%20b&utm_medium=email&page=2"
    assert clean_url(raw) == "https://example.com/search?q=a%20b&page=2"


def test_clean_url_leaves_clean_urls_untouched():
    raw = "https://example.com/a?b=1&a=2"
    assert clean_url(raw) == raw
    assert clean_url("https://example.com/plain") == "https://example.com/plain"


def test_host_of():
    assert host_of("https://WWW.Example.com/a") == "example.com"
    assert host_of("https://blog.example.com/a") == "blog.example.com"
    assert host_of("not a url") == ""


def test_is_shortened():
    assert is_shortened("https://bit.ly/abc")
    assert not is_shortened("https://example.com/abc")


def test_trailing_punctuation():
    assert strip_trailing_punctuation("https://example.com/a.") == "https://example.com/a"
    assert strip_trailing_punctuation("https://example.com/a),") == "https://example.com/a"


def test_balanced_parenthesis_is_kept():
    text = "See https://en.wikipedia.org/wiki/Python_(programming_language)."
    assert extract_urls(text) == ["https://en.wikipedia.org/wiki/Python_(programming_language)"]


def test_extract_urls_unwraps_markdown_and_dedupes():
    text = (
        "1. [CSS Grid](https://css-tricks.com/grid/)\n"
        "2. https://dev.to/post-1, and again (https://css-tricks.com/grid/)\n"
    )
    assert extract_urls(text) == ["https://css-tricks.com/grid/", "https://dev.to/post-1"]


def test_extract_urls_ignores_plain_text():
    assert extract_urls("No links here, just www.example.com") == []


def test_extract_urls_ignores_scheme_case():
    assert extract_urls("Read HTTPS://EXAMPLE.COM/A-B now") == ["HTTPS://EXAMPLE.COM/A-B"]
    assert extract_urls("[Post](Https://example.com/p)") == ["Https://example.com/p"]


def test_url_key_folds_scheme_and_host_only():
    assert url_key("HTTPS://Example.COM/A-B?utm_source=x") == "https://example.com/A-B"
    assert url_key("https://example.com/a?id=1") == "https://example.com/a?id=1"
