"""
Plain-text excerpts from marked-up upstream bodies (Steam news, GameSpot decks).

Steam news `contents` mixes HTML, BBCode-style tags ([b], [url=...]), clan image
placeholders and bare image links. `clean_text` strips all of that; `make_excerpt`
additionally bounds the length for list display.
"""
import re

MIN_EXCERPT_LENGTH = 20
MAX_EXCERPT_LENGTH = 300
BOUNDARY_SEARCH_START = 200
ELLIPSIS = "..."

_IMG_TAG = re.compile(r"<img[^>]*>", re.IGNORECASE)
_SRC_ATTR = re.compile(r"""src\s*=\s*["'][^"']*["']""", re.IGNORECASE)
_BARE_IMG_SRC = re.compile(r"\bimg\s+src[^>\s]*[>\s]", re.IGNORECASE)
_TAG = re.compile(r"<[^>]*>")

# Replaced one at a time, in this order.
_ENTITIES = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&apos;", "'"),
)

_BB_IMAGE_BLOCK = re.compile(r"\[img\][^\[]*\[/img\]", re.IGNORECASE)
_BB_VIDEO_BLOCK = re.compile(r"\[previewyoutube=[^\]]*\][^\[]*\[/previewyoutube\]", re.IGNORECASE)
_BB_TAG = re.compile(r"\[/?\w+\]")
_BB_TAG_WITH_ATTR = re.compile(r"\[/?\w+=[^\]]*\]")
_TEMPLATE_PLACEHOLDER = re.compile(r"\{STEAM_CLAN(?:_LOC)?_IMAGE\}")

_IMAGE_URL = re.compile(r"https?://\S*\.(?:jpg|jpeg|png|gif|webp|bmp)\S*", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


def clean_text(raw: str) -> str:
    """Strip markup, entities, Steam formatting and image links; collapse whitespace."""
    if not raw:
        return ""

    text = _IMG_TAG.sub("", raw)
    text = _SRC_ATTR.sub("", text)
    text = _BARE_IMG_SRC.sub("", text)

    text = _TAG.sub(" ", text)

    for entity, literal in _ENTITIES:
        text = text.replace(entity, literal)

    text = _BB_IMAGE_BLOCK.sub("", text)
    text = _BB_VIDEO_BLOCK.sub("", text)
    text = _BB_TAG.sub("", text)
    text = _BB_TAG_WITH_ATTR.sub("", text)
    text = _TEMPLATE_PLACEHOLDER.sub("", text)

    text = _IMAGE_URL.sub("", text)

    return _WHITESPACE.sub(" ", text).strip()


def truncate_excerpt(text: str) -> str:
    """
    Bound `text` to MAX_EXCERPT_LENGTH (+ ellipsis), preferring a sentence end,
    then a word boundary, past BOUNDARY_SEARCH_START.
    """
    if len(text) <= MAX_EXCERPT_LENGTH:
        return text
    # Already an excerpt (truncated text plus ellipsis)
    if len(text) <= MAX_EXCERPT_LENGTH + len(ELLIPSIS) and text.endswith(ELLIPSIS):
        return text

    cut = text[:MAX_EXCERPT_LENGTH]
    last_period = cut.rfind(".")
    last_space = cut.rfind(" ")

    if last_period > BOUNDARY_SEARCH_START:
        return cut[: last_period + 1]
    if last_space > BOUNDARY_SEARCH_START:
        return cut[:last_space] + ELLIPSIS
    return cut + ELLIPSIS


def make_excerpt(raw: str) -> str:
    """
    Clean + bound. Returns "" when fewer than MIN_EXCERPT_LENGTH characters survive
    cleaning, so callers can show a fallback instead of fragments.
    """
    text = clean_text(raw)
    if len(text) < MIN_EXCERPT_LENGTH:
        return ""
    return truncate_excerpt(text)
