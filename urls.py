"""URL helpers for links pulled out of newsletters and AI replies.

- extract_urls: find http(s) links in free text, unwrapping markdown links
- clean_url: drop analytics/referral query parameters, keep everything else
- url_key: clean_url plus case-folded scheme and host, used as a lookup key
- is_shortened: detect link-shortener hosts whose target cannot be verified
"""

import re
from urllib.parse import urlsplit, urlunsplit

# Parameters whose key starts with one of these are always dropped
TRACKING_PREFIXES = ("utm_",)

# Exact keys (case-insensitive) for common analytics and referral trackers
TRACKING_PARAMS = frozenset({
    "gclid", "dclid", "gbraid", "wbraid",  # Google Ads
    "fbclid",                               # Facebook
    "msclkid",                              # Microsoft Ads
    "yclid",                                # Yandex
    "igshid",                               # Instagram
    "twclid",                               # X / Twitter
    "mc_cid", "mc_eid",                     # Mailchimp
    "_hsenc", "_hsmi",                      # HubSpot
    "mkt_tok",                              # Marketo
    "oly_anon_id", "oly_enc_id",            # Omeda
    "vero_id", "vero_conv",                 # Vero
    "wickedid",
    "spm",
    "cmpid",
    "ref", "ref_src", "ref_url",
})

SHORTENER_HOSTS = frozenset({
    "bit.ly", "bitly.com", "t.co", "tinyurl.com", "goo.gl", "ow.ly",
    "buff.ly", "is.gd", "lnkd.in", "rebrand.ly", "t.ly", "cutt.ly",
    "shorturl.at", "tiny.cc", "rb.gy", "s.id", "dlvr.it", "trib.al",
})

_MARKDOWN_LINK = re.compile(r"\[[^\]]*\]\((https?://[^\s)]+)\)", re.IGNORECASE)
_URL = re.compile(r"https?://\S+", re.IGNORECASE)
_TRAILING = ".,;:!?)]}>'\"*`_"


def _is_tracking(key: str) -> bool:
    key = key.lower()
    return key.startswith(TRACKING_PREFIXES) or key in TRACKING_PARAMS


def clean_url(url: str) -> str:
    """Remove tracking query parameters from a URL.

    Non-tracking parameters keep their order and original encoding, and the
    fragment is preserved. URLs without tracking parameters come back
    unchanged.

    Example:
        >>> clean_url("https://example.com/a?utm_source=x&id=123")
        'https://example.com/a?id=123'
    """
    url = url.strip()
    parts = urlsplit(url)
    if not parts.query:
        return url

    pairs = [p for p in parts.query.split("&") if p]
    kept = [p for p in pairs if not _is_tracking(p.split("=", 1)[0])]
    if len(kept) == len(pairs):
        return url
    return urlunsplit(parts._replace(query="&".join(kept)))


def url_key(url: str) -> str:
    """Cleaned URL with scheme and host lower-cased, for comparing links.

    Path, query and fragment stay case-sensitive.
    """
    parts = urlsplit(clean_url(url))
    return urlunsplit(parts._replace(scheme=parts.scheme.lower(), netloc=parts.netloc.lower()))


def host_of(url: str) -> str:
    """Lower-cased host without a leading "www."."""
    host = (urlsplit(url).hostname or "").lower()
    return host[4:] if host.startswith("www.") else host


def is_shortened(url: str) -> bool:
    """True when the URL points at a known link shortener."""
    return host_of(url) in SHORTENER_HOSTS


def strip_trailing_punctuation(url: str) -> str:
    """Drop sentence punctuation and closing brackets glued to a URL.

    A closing parenthesis is kept when the URL itself opened one, as in
    Wikipedia-style links.
    """
    while url and url[-1] in _TRAILING:
        if url[-1] == ")" and url.count("(") >= url.count(")"):
            break
        url = url[:-1]
    return url


def extract_urls(text: str) -> list[str]:
    """Find http(s) URLs in free text.

    Markdown links are unwrapped to their target first, trailing
    punctuation is stripped, and duplicates are removed keeping the
    first occurrence. No tracking cleanup happens here.
    """
    text = _MARKDOWN_LINK.sub(lambda m: f" {m.group(1)} ", text)
    urls = []
    for raw in _URL.findall(text):
        url = strip_trailing_punctuation(raw)
        if url and url not in urls:
            urls.append(url)
    return urls
