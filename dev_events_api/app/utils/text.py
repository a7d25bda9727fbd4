import re
import unicodedata


SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

DEFAULT_SLUG = "event"


def slugify(text: str) -> str:
    """Convert a title to a URL-safe slug such as ``pycon-hackathon-2024``."""
    text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    text = re.sub(r"[^a-z0-9]+", "-", text.lower())
    return text.strip("-") or DEFAULT_SLUG


def is_valid_slug(slug: str) -> bool:
    """Lowercase letters, digits and single hyphens between them."""
    return bool(SLUG_PATTERN.fullmatch(slug))
