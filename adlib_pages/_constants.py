"""Common literal values shared by the renderer, extractor, and admin handlers.

The annotation attribute names form the wire format between rendered markup
and the extractor, so they are defined once here and imported everywhere
else. Intended for internal use within the adlib_pages package.

Examples
--------
>>> from adlib_pages import _constants
>>> _constants.PATH_ATTR
'data-adlib-cms'
>>> "number" in _constants.TYPE_TAGS
True
"""

PATH_ATTR = "data-adlib-cms"
TYPE_ATTR = "data-adlib-type"
LIST_ATTR = "data-adlib-list"
INDEX_ATTR = "data-adlib-index"
VALUE_ATTR = "data-target"
MIRROR_ATTR = "data-adlib-mirror"

TYPE_TEXT = "text"
TYPE_RICHTEXT = "richtext"
TYPE_NUMBER = "number"
TYPE_IMAGE = "image"
TYPE_VIDEO = "video"
TYPE_TAGS = frozenset({TYPE_RICHTEXT, TYPE_NUMBER, TYPE_IMAGE, TYPE_VIDEO})

ARROW_GLYPH = "→"
OPEN_QUOTE = "“"
CLOSE_QUOTE = "”"
PROVE_WORD_CLASS = "prove-word"

DEFAULT_IMAGE_PATHS: tuple[str, ...] = (
    "images/jeanne-marie-ellis.jpg",
    "images/mission-bg.jpg",
    "images/testimonial-0.jpg",
    "images/testimonial-1.jpg",
    "images/testimonial-2.jpg",
    "images/hero-bg.webm",
    "images/hero-bg.mp4",
)

DEFAULT_API_BASE = "https://api.github.com"
CONTENT_COMMIT_MESSAGE = "Update content via admin"
IMAGE_COMMIT_MESSAGE = "Update {path} via admin"
