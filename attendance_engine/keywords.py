"""Free-text keyword classification."""

from __future__ import annotations

from typing import Optional

from attendance_engine.schema import Keyword


def classify(text: Optional[str]) -> Optional[Keyword]:
    """Return the first keyword whose token appears in ``text``, if any.

    Matching is case-insensitive substring containment tested in ``Keyword``
    declaration order, so a message mentioning several tokens resolves to the
    earliest member.
    """

    if not text:
        return None
    lowered = text.lower()
    for keyword in Keyword:
        if keyword.token in lowered:
            return keyword
    return None


def parse_keyword(value: str) -> Optional[Keyword]:
    """Resolve an enum name (``BREAK_START``) or free text to a keyword."""

    name = str(value).strip().upper().replace("-", "_")
    if name in Keyword.__members__:
        return Keyword[name]
    return classify(value)
