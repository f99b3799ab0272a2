"""Render extra pages written in markdown or plain text into HTML fragments."""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ
from html import escape

from markdown import Markdown
from pygments.formatters.html import HtmlFormatter

from .heading_anchors import HeadingAnchorExtension

if typ.TYPE_CHECKING:
    from markdown.extensions import Extension

    from refdocs.models import HeaderEntry
else:  # pragma: no cover - type-checking fallback
    Extension = typ.Any

CODE_BLOCK_PATTERN = re.compile(r"```([A-Za-z0-9_+#.-]+)?[^\n]*\n(.*?)```", re.DOTALL)
FENCED_INDENT_PATTERN = re.compile(r"^[ ]{1,3}([`~]{3,})", re.MULTILINE)
FENCE_LABEL_PATTERN = re.compile(
    r"^([`~]{3,})([A-Za-z0-9_+#.-]+)?(,[^\r\n]+)$", re.MULTILINE
)
CODEHILITE_OPEN_TAG = re.compile(r'<div class="codehilite">')


@dc.dataclass(slots=True, frozen=True)
class RenderedDocument:
    """HTML body plus the outline extracted while rendering it.

    Attributes
    ----------
    html : str
        Rendered body without its leading level-one heading.
    title : str | None
        Text of the leading level-one heading, if the source had one.
    headers : tuple[HeaderEntry, ...]
        Level-two headings with their anchors, in document order.
    """

    html: str
    title: str | None = None
    headers: tuple[HeaderEntry, ...] = ()


class HtmlContentRenderer:
    """Render markdown and plain text with consistent styling."""

    def __init__(self, pygments_style: str = "default") -> None:
        """Initialize a renderer with an optional pygments style.

        Parameters
        ----------
        pygments_style : str, optional
            Name of the Pygments style used for syntax highlighting. Defaults
            to ``"default"``.
        """
        self.pygments_style = pygments_style
        self._formatter = HtmlFormatter(style=pygments_style, cssclass="codehilite")

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return self._formatter.get_style_defs(".codehilite")

    def markdown(self, text: str) -> RenderedDocument:
        """Render markdown into HTML, collecting the title and headings."""
        normalized = self._normalize_fenced_blocks(text)
        if not normalized.strip():
            return RenderedDocument(html="")
        anchors = HeadingAnchorExtension()
        extensions: list[Extension | str] = [
            "fenced_code",
            "codehilite",
            "tables",
            "sane_lists",
            anchors,
        ]
        md = Markdown(
            extensions=extensions,
            extension_configs={
                "codehilite": {
                    "linenums": False,
                    "guess_lang": False,
                    "css_class": "codehilite",
                    "pygments_style": self.pygments_style,
                }
            },
        )
        html = md.convert(normalized)
        return RenderedDocument(
            html=self._annotate_codehilite(html, normalized),
            title=anchors.title,
            headers=tuple(anchors.headers),
        )

    @staticmethod
    def plain_text(text: str) -> RenderedDocument:
        """Render ``text`` verbatim inside a preformatted block."""
        if not text.strip():
            return RenderedDocument(html="")
        return RenderedDocument(html=f"<pre>{escape(text, quote=False)}</pre>")

    def _annotate_codehilite(self, html: str, source_markdown: str) -> str:
        """Attach language metadata to each highlighted block in converted markdown."""
        languages = [
            match.group(1) or "text"
            for match in CODE_BLOCK_PATTERN.finditer(source_markdown)
        ]
        if not languages:
            return html
        lang_iter = iter(languages)

        def _repl(match: re.Match[str]) -> str:
            lang = next(lang_iter, "text")
            return (
                f'<div class="codehilite" data-language="{escape(lang, quote=True)}">'
            )

        return CODEHILITE_OPEN_TAG.sub(_repl, html, len(languages))

    @staticmethod
    def _normalize_fenced_blocks(text: str) -> str:
        without_indent = FENCED_INDENT_PATTERN.sub(r"\1", text)

        def _strip_labels(match: re.Match[str]) -> str:
            fence, language, _extras = match.groups()
            label = language or ""
            return f"{fence}{label}"

        return FENCE_LABEL_PATTERN.sub(_strip_labels, without_indent)


__all__ = ["HtmlContentRenderer", "RenderedDocument"]
