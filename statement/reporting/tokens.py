"""{{ path.to.value }} substitution with pass-through for unknown tokens."""
from __future__ import annotations

import re
from typing import Mapping

PLACEHOLDER_RE = re.compile(r"\{\{\s*([\w.-]+)\s*\}\}")


def replace_tokens(template: str, tokens: Mapping[str, str]) -> str:
    """
    Replace every placeholder whose path is in ``tokens``.

    Unknown paths keep their original marker text so gaps stay visible in the
    output. Substituted values are not scanned again.
    """

    def _sub(match: re.Match[str]) -> str:
        token = match.group(1)
        if token in tokens:
            return tokens[token]
        return match.group(0)

    return PLACEHOLDER_RE.sub(_sub, template)


def find_placeholders(text: str) -> list[str]:
    """Token paths of the markers present in ``text``, first occurrence order, no duplicates."""
    seen: dict[str, None] = {}
    for match in PLACEHOLDER_RE.finditer(text):
        seen.setdefault(match.group(1), None)
    return list(seen)
