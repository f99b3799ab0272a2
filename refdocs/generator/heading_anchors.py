"""Markdown extension that anchors headings and records the page outline."""

from __future__ import annotations

import re
import typing as typ

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

from refdocs.models import HeaderEntry
from refdocs.slugs import UniqueIdAllocator, slugify

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any

STASH_PLACEHOLDER = re.compile("\x02wzxhzdk:\\d+\x03")
ANCHORED_TAGS = frozenset({"h2", "h3"})


class HeadingAnchorExtension(Extension):
    """Give section headings stable ids and collect them for navigation.

    After conversion, :attr:`title` holds the text of the leading level-one
    heading (which is removed from the body, since page templates render the
    title themselves) and :attr:`headers` lists every level-two heading in
    document order. Use one instance per conversion.
    """

    def __init__(self) -> None:
        super().__init__()
        self.title: str | None = None
        self.headers: list[HeaderEntry] = []

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the heading treeprocessor on the Markdown instance."""
        processor = HeadingAnchorTreeprocessor(md, self)
        md.treeprocessors.register(processor, "refdocs_heading_anchors", 15)


class HeadingAnchorTreeprocessor(Treeprocessor):
    """Assign slug ids to ``h2``/``h3`` elements and lift the leading ``h1``."""

    def __init__(self, md: Markdown, extension: HeadingAnchorExtension) -> None:
        super().__init__(md)
        self.extension = extension

    def run(self, root: Element) -> Element:  # pragma: no cover - Markdown API
        """Annotate headings in the parsed markdown tree."""
        children = list(root)
        if children and children[0].tag == "h1":
            self.extension.title = _element_text(children[0]) or None
            root.remove(children[0])

        allocator = UniqueIdAllocator()
        for element in root.iter():
            if element.tag not in ANCHORED_TAGS:
                continue
            text = _element_text(element)
            base = slugify(text)
            if not base:
                continue
            anchor = allocator.allocate(base)
            element.set("id", anchor)
            element.set("class", "section-heading")
            if element.tag == "h2":
                self.extension.headers.append(HeaderEntry(anchor=anchor, text=text))
        return root


def _element_text(element: Element) -> str:
    text = "".join(element.itertext())
    return " ".join(STASH_PLACEHOLDER.sub("", text).split())


__all__ = ["HeadingAnchorExtension", "HeadingAnchorTreeprocessor"]
