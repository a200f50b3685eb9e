from __future__ import annotations

import re

# Anything that is not a latin or cyrillic letter or a digit carries no meaning for matching.
# U+0482..U+0489 are cyrillic signs and combining marks, not letters.
_MEANINGLESS = re.compile(r"[^A-Za-z\u0400-\u0481\u048A-\u04FF0-9]+")


def normalize(text: str) -> str:
    """Reduce raw user input to the canonical form used for every comparison.

    Stripped characters are deleted, not replaced by a separator:

        normalize(" Hello, World!! ") == "helloworld"
    """

    return _MEANINGLESS.sub("", text).lower()
