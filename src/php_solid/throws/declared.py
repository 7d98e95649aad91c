# --- Declared throws (docblock) -----------------------------------------------
"""
Reads the exception types a method documents with ``@throws``.

Supported forms:
    @throws RuntimeException
    @throws RuntimeException|InvalidArgumentException
    @throws \\RuntimeException
    @throws RuntimeException Description text
    /** @throws RuntimeException */
"""
import re
from typing import Optional

# Tag at the start of a docblock line, after an optional "/**" or "*".
_THROWS_RE = re.compile(r"^[ \t]*(?:/\*\*|\*)?[ \t]*@throws[ \t]+([^\s*]+)", re.MULTILINE)


def dedupe(names) -> list[str]:
    """Drops repeated names (case-insensitive), keeping first-seen order and spelling."""
    seen: set[str] = set()
    result = []
    for name in names:
        key = name.lower()
        if key not in seen:
            seen.add(key)
            result.append(name)
    return result


def extract_declared_throws(doc_comment: Optional[str]) -> list[str]:
    """
    Returns the exception names listed by ``@throws`` tags, leading backslashes
    stripped, deduplicated in first-seen order. No docblock or no tag means
    the method declares no exception at all, which is the strictest contract.
    """
    if not doc_comment:
        return []

    throws = []
    for declaration in _THROWS_RE.findall(doc_comment):
        for part in declaration.split("|"):
            part = part.strip().lstrip("\\")
            if part:
                throws.append(part)
    return dedupe(throws)
