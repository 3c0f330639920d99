from __future__ import annotations
import re

from app.schemas.submission import Category

# Caption markers used by the chat bot. Shipping and mindfulness win over the gym markers.
_SHIPPING = re.compile(r"/shipped\b", re.IGNORECASE)
_MINDFULNESS = re.compile(r"/zenned\b", re.IGNORECASE)
_GYM = re.compile(r"/pump(?:ed)?\b", re.IGNORECASE)

_MENTION = re.compile(r"(?<![\w@])@([A-Za-z0-9_]{1,64})")


def category_from_caption(caption: str | None) -> Category | None:
    if not caption:
        return None
    if _SHIPPING.search(caption):
        return "shipping"
    if _MINDFULNESS.search(caption):
        return "mindfulness"
    if _GYM.search(caption):
        return "gym"
    return None


def extract_mentions(caption: str | None) -> list[str]:
    """@handles in order of appearance, without the '@', case-insensitively de-duplicated."""
    if not caption:
        return []
    seen: set[str] = set()
    out: list[str] = []
    for handle in _MENTION.findall(caption):
        key = handle.lower()
        if key in seen:
            continue
        seen.add(key)
        out.append(handle)
    return out
