r"""Normalise titles and paths into stable output identifiers.

Every page, anchor and extra filename produced by refdocs passes through
:func:`slugify`, so the rules here decide what a reader sees in URLs. Titles
may contain inline markup (``Git opts (<code>:git</code>)``) or HTML
entities; both are discarded before the text is reduced to letters, digits,
underscores and single hyphens.

Example
-------
>>> from refdocs.slugs import UniqueIdAllocator, slugify, strip_tags
>>> slugify("Git opts (<code class=\"inline\">:git</code>)")
'git-opts-git'
>>> strip_tags("<p>P1.</p><p>P2</p>", " ")
' P1.  P2 '
>>> allocator = UniqueIdAllocator()
>>> [allocator.allocate("readme"), allocator.allocate("readme")]
['readme', 'readme-2']
"""

from __future__ import annotations

import re

TAG_PATTERN = re.compile(r"<[^>]*>", re.MULTILINE)
NUMERIC_ENTITY_PATTERN = re.compile(r"&#\d+;")
NAMED_ENTITY_PATTERN = re.compile(r"&[A-Za-z0-9]+;")
DISALLOWED_PATTERN = re.compile(r"[^\w\s-]")
SEPARATOR_PATTERN = re.compile(r"[\s-]+")


def strip_tags(text: str, replacement: str = "") -> str:
    """Remove tag markup from ``text`` while keeping the text between tags.

    Parameters
    ----------
    text : str
        HTML fragment to clean.
    replacement : str, optional
        String inserted wherever a tag was removed. Pass ``" "`` to keep
        words in adjacent block elements apart.

    Returns
    -------
    str
        ``text`` with every ``<...>`` sequence replaced by ``replacement``.
    """
    return TAG_PATTERN.sub(replacement, text)


def slugify(title: str) -> str:
    """Convert ``title`` into a lowercase hyphen-separated identifier.

    Returns an empty string when ``title`` holds no letter or digit content
    (a lone glyph, or an entity such as ``&sup2;``); callers must treat that
    as "no identifier available".
    """
    text = strip_tags(title)
    text = NUMERIC_ENTITY_PATTERN.sub("", text)
    text = NAMED_ENTITY_PATTERN.sub("", text)
    text = DISALLOWED_PATTERN.sub("", text.lower())
    return SEPARATOR_PATTERN.sub("-", text).strip("-")


class UniqueIdAllocator:
    """Hand out identifiers, suffixing repeats with ``-2``, ``-3`` and so on."""

    def __init__(self, reserved: set[str] | None = None) -> None:
        self._used: set[str] = set(reserved or ())

    def allocate(self, base: str) -> str:
        """Return ``base`` or the first free ``base-N`` and mark it as used."""
        candidate = base
        suffix = 2
        while candidate in self._used:
            candidate = f"{base}-{suffix}"
            suffix += 1
        self._used.add(candidate)
        return candidate

    def __contains__(self, value: object) -> bool:
        return value in self._used


__all__ = ["UniqueIdAllocator", "slugify", "strip_tags"]
