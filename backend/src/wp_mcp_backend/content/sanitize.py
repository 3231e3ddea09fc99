"""HTML sanitization for post content.

Keeps a post-HTML allowlist comparable to what a CMS permits in post
bodies, and provides the text helpers the post tools use for titles and
excerpts.
"""

from __future__ import annotations

import html
import re
from urllib.parse import urlsplit

from bs4 import BeautifulSoup, Comment

# Elements removed together with everything inside them
DROP_WITH_CONTENT = frozenset(
    {
        "script",
        "style",
        "iframe",
        "frame",
        "frameset",
        "object",
        "embed",
        "applet",
        "form",
        "input",
        "button",
        "select",
        "textarea",
        "noscript",
        "template",
        "meta",
        "link",
        "base",
        "head",
        "title",
    }
)

GLOBAL_ATTRIBUTES = frozenset({"class", "id", "title", "lang", "dir", "role"})

ALLOWED_TAGS: dict[str, frozenset[str]] = {
    "a": frozenset({"href", "rel", "target", "name"}),
    "abbr": frozenset(),
    "address": frozenset(),
    "article": frozenset(),
    "aside": frozenset(),
    "audio": frozenset({"src", "controls", "loop", "muted", "preload"}),
    "b": frozenset(),
    "blockquote": frozenset({"cite"}),
    "br": frozenset(),
    "caption": frozenset(),
    "cite": frozenset(),
    "code": frozenset(),
    "col": frozenset({"span"}),
    "colgroup": frozenset({"span"}),
    "dd": frozenset(),
    "del": frozenset({"datetime"}),
    "details": frozenset({"open"}),
    "div": frozenset(),
    "dl": frozenset(),
    "dt": frozenset(),
    "em": frozenset(),
    "figcaption": frozenset(),
    "figure": frozenset(),
    "footer": frozenset(),
    "h1": frozenset(),
    "h2": frozenset(),
    "h3": frozenset(),
    "h4": frozenset(),
    "h5": frozenset(),
    "h6": frozenset(),
    "header": frozenset(),
    "hr": frozenset(),
    "i": frozenset(),
    "img": frozenset({"src", "alt", "width", "height", "srcset", "sizes", "loading"}),
    "ins": frozenset({"datetime"}),
    "kbd": frozenset(),
    "li": frozenset({"value"}),
    "mark": frozenset(),
    "ol": frozenset({"start", "reversed", "type"}),
    "p": frozenset(),
    "pre": frozenset(),
    "q": frozenset({"cite"}),
    "s": frozenset(),
    "section": frozenset(),
    "small": frozenset(),
    "source": frozenset({"src", "type", "srcset", "media"}),
    "span": frozenset(),
    "strong": frozenset(),
    "sub": frozenset(),
    "summary": frozenset(),
    "sup": frozenset(),
    "table": frozenset(),
    "tbody": frozenset(),
    "td": frozenset({"colspan", "rowspan"}),
    "tfoot": frozenset(),
    "th": frozenset({"colspan", "rowspan", "scope"}),
    "thead": frozenset(),
    "tr": frozenset(),
    "u": frozenset(),
    "ul": frozenset(),
    "video": frozenset({"src", "controls", "loop", "muted", "poster", "width", "height"}),
}

URL_ATTRIBUTES = frozenset({"href", "src", "cite", "poster"})
SAFE_URL_SCHEMES = frozenset({"", "http", "https", "mailto", "tel", "ftp"})

_WHITESPACE_RE = re.compile(r"\s+")
_CONTROL_RE = re.compile(r"[\x00-\x20]+")

ELLIPSIS = "&hellip;"


def is_safe_url(value: str) -> bool:
    """Return True if ``value`` uses a scheme allowed in post HTML."""
    candidate = _CONTROL_RE.sub("", value or "")
    try:
        scheme = urlsplit(candidate).scheme.lower()
    except ValueError:
        return False
    return scheme in SAFE_URL_SCHEMES


def _attribute_allowed(tag_name: str, attribute: str) -> bool:
    name = attribute.lower()
    if name.startswith("on"):
        return False
    if name.startswith("aria-") or name.startswith("data-"):
        return True
    return name in GLOBAL_ATTRIBUTES or name in ALLOWED_TAGS[tag_name]


def sanitize_post_html(content: str) -> str:
    """Reduce ``content`` to the post-HTML allowlist.

    Dangerous elements are removed with their contents, unknown elements
    are unwrapped so their text survives, and attributes are filtered.

    Args:
        content: Raw HTML from the caller

    Returns:
        Sanitized HTML
    """
    if not content:
        return ""

    soup = BeautifulSoup(content, "html.parser")

    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()

    for element in soup.find_all(list(DROP_WITH_CONTENT)):
        element.extract()

    for tag in soup.find_all(True):
        if tag.name not in ALLOWED_TAGS:
            tag.unwrap()
            continue

        for attribute in list(tag.attrs):
            if not _attribute_allowed(tag.name, attribute):
                del tag[attribute]
                continue
            if attribute.lower() in URL_ATTRIBUTES:
                value = tag[attribute]
                if isinstance(value, list):
                    value = " ".join(value)
                if not is_safe_url(value):
                    del tag[attribute]

    return str(soup)


def strip_tags(content: str) -> str:
    """Return the text of ``content`` with every tag removed."""
    if not content:
        return ""
    soup = BeautifulSoup(content, "html.parser")
    for element in soup(["script", "style"]):
        element.decompose()
    return soup.get_text()


def sanitize_text_field(value: str) -> str:
    """Plain-text field cleanup: strip tags and collapse whitespace."""
    return _WHITESPACE_RE.sub(" ", strip_tags(value)).strip()


def trim_words(content: str, num_words: int = 50, more: str = ELLIPSIS) -> str:
    """Strip tags and keep the first ``num_words`` words.

    Args:
        content: HTML or text
        num_words: Maximum number of words to keep
        more: Suffix appended when words were dropped

    Returns:
        Words joined by single spaces
    """
    words = strip_tags(content).split()
    if len(words) > num_words:
        return " ".join(words[:num_words]) + more
    return " ".join(words)


def build_image_tag(url: str, alt: str) -> str:
    """Render the image tag create-post places ahead of the body."""
    src = url.strip() if is_safe_url(url.strip()) else ""
    return (
        f'<img src="{html.escape(src, quote=True)}" '
        f'alt="{html.escape(alt, quote=True)}" class="cloudinary-image" />'
    )
