"""
Text Normalizer
===============
Cleans single lines of extracted PDF text before classification.
"""

from __future__ import annotations

import re

# "<br>", "<br/>", "<br />" left behind by HTML-ish text exporters
BR_TAG_PATTERN = re.compile(r"<br\s*/?>")


def clean_text(line: str) -> str:
    """Replace line-break tags with a space and strip surrounding whitespace."""
    return BR_TAG_PATTERN.sub(" ", line).strip()
