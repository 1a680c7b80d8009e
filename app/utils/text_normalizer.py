import re

MAX_PROMPT_CHARS = 500
FILENAME_PREFIX_CHARS = 50
DEFAULT_FILENAME = "generated-image"

_WHITESPACE_RE = re.compile(r"\s+")
_FILENAME_UNSAFE_RE = re.compile(r"[^a-z0-9\s-]", re.IGNORECASE)
_EXTENSION_RE = re.compile(r"[a-z0-9.-]+")


def sanitize_prompt(raw: object, max_chars: int = MAX_PROMPT_CHARS) -> str:
    """Normalize a user prompt before it is sent upstream.

    Trims the text, collapses every run of whitespace into a single space and
    cuts the result at ``max_chars`` (hard cutoff, not word-aware). Anything
    that is not a string yields an empty string.

    URL encoding is left to the transport layer.

    Args:
        raw: User-supplied prompt.
        max_chars: Maximum length of the result.

    Returns:
        str: Sanitized prompt, possibly empty.
    """
    if not raw or not isinstance(raw, str):
        return ""

    text = _WHITESPACE_RE.sub(" ", raw.strip())
    # A cut can expose a trailing space; strip it so sanitizing is idempotent.
    return text[:max_chars].rstrip()


def slugify_filename(prompt: str, max_chars: int = FILENAME_PREFIX_CHARS) -> str:
    """Build a download filename stem from the beginning of a prompt.

    Examples:
        >>> slugify_filename("Sunset over the Ocean!")
        'sunset-over-the-ocean'
        >>> slugify_filename("???")
        'generated-image'
    """
    stem = _FILENAME_UNSAFE_RE.sub("", prompt[:max_chars])
    stem = _WHITESPACE_RE.sub("-", stem).lower()
    return stem or DEFAULT_FILENAME


def extension_for_content_type(content_type: str | None) -> str:
    """Map an image media type to a file extension (``image/jpeg`` -> ``jpg``)."""
    if not content_type:
        return "jpg"

    media_type = content_type.split(";", 1)[0].strip().lower()
    _, _, subtype = media_type.partition("/")
    subtype = subtype.split("+", 1)[0]
    if not subtype or subtype in {"jpeg", "pjpeg"} or not _EXTENSION_RE.fullmatch(subtype):
        return "jpg"
    return subtype
