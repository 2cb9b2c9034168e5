from __future__ import annotations

import re
import unicodedata

_NON_WORD = re.compile(r"[^a-z0-9]+")


# PUBLIC_INTERFACE
def create_slug(text: str | None) -> str:
    """
    Lowercase ASCII slug: accents are folded, runs of other characters become one dash.

    >>> create_slug("Hello, Wörld!")
    'hello-world'
    """
    if not text:
        return ""
    folded = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    return _NON_WORD.sub("-", folded.lower()).strip("-")
