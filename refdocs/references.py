"""Rewrite symbolic references in rendered content into intra-corpus links.

Documentation content arrives as HTML in which authors mention other parts
of the corpus inside inline code spans:

* ``Foo.Bar`` or ``m:Foo.Bar`` for a module,
* ``Foo.bar/1`` for a function or macro,
* ``t:Foo.type/0`` for a type and ``c:Foo.callback/1`` for a callback.

:class:`ReferenceResolver` turns each marker whose target is documented into
a link such as ``Foo.html#bar/1`` and records a :class:`ReferenceWarning`
for every marker it cannot resolve. Typespec fragments are scanned for
remote type calls (``Foo.t(integer())``) the same way, and relative links in
extra pages (``[license](LICENSE)``) are pointed at the generated page of
the extra they name. Warnings are collected, never raised, and reported once
per build through :func:`report_warnings`.

Example
-------
>>> from refdocs.models import DocMember, DocNode
>>> from refdocs.references import ReferenceIndex, ReferenceResolver
>>> target = DocNode(id="Foo", title="Foo", members=(DocMember("function", "bar", 1),))
>>> index = ReferenceIndex.build([target])
>>> node = DocNode(id="Baz", title="Baz", content='<code class="inline">Foo.bar/1</code>')
>>> resolved, warnings = ReferenceResolver(index).resolve_node(node)
>>> resolved.content
'<a href="Foo.html#bar/1"><code class="inline">Foo.bar/1</code></a>'
>>> warnings
[]
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import posixpath
import re
import typing as typ
from urllib.parse import urlsplit

from loguru import logger

from refdocs.models import ReferenceWarning

if typ.TYPE_CHECKING:
    from refdocs.models import DocMember, DocNode, WarningReason

MODULE_PART = r"[A-Z][A-Za-z0-9_]*(?:\.[A-Z][A-Za-z0-9_]*)*"
NAME_PART = r"[a-z_][A-Za-z0-9_]*[?!]?"

SKIP_PATTERN = re.compile(r"<(a|pre)\b[^>]*>.*?</\1>", re.DOTALL | re.IGNORECASE)
CODE_PATTERN = re.compile(
    r'<code(?P<attrs>(?:\s+class="inline")?)>(?P<text>[^<]+)</code>'
)
MARKER_PATTERN = re.compile(
    rf"^(?:(?P<prefix>[mtc]):)?(?P<module>{MODULE_PART})"
    rf"(?:\.(?P<name>{NAME_PART})/(?P<arity>\d+))?$"
)
REMOTE_TYPE_PATTERN = re.compile(
    rf"(?<![\w.])(?P<module>{MODULE_PART})\.(?P<name>{NAME_PART})\("
)
HREF_PATTERN = re.compile(r'href="(?P<target>[^"]+)"')

MARKER_KINDS = {"t": "type", "c": "callback", None: "function"}
ANCHOR_PREFIXES = {"type": "t:", "callback": "c:", "function": ""}


@dc.dataclass(slots=True, frozen=True)
class ReferenceIndex:
    """Everything a reference may point at.

    Attributes
    ----------
    anchors : Mapping[str, frozenset[str]]
        Documented module and task ids mapped to their member anchors.
    filtered : frozenset[str]
        Ids of modules removed from the documentation set.
    extras_by_path : Mapping[str, str]
        Normalised extra source paths mapped to the extra's output id.
    """

    anchors: cabc.Mapping[str, frozenset[str]]
    filtered: frozenset[str] = frozenset()
    extras_by_path: cabc.Mapping[str, str] = dc.field(default_factory=dict)

    @classmethod
    def build(
        cls,
        nodes: cabc.Iterable[DocNode],
        *,
        filtered: cabc.Iterable[str] = (),
    ) -> ReferenceIndex:
        """Index ``nodes`` (modules, tasks and extras) for resolution."""
        anchors: dict[str, frozenset[str]] = {}
        extras_by_path: dict[str, str] = {}
        for node in nodes:
            if node.kind == "extra":
                if node.source_path:
                    extras_by_path[posixpath.normpath(node.source_path)] = node.id
                continue
            anchors[node.id] = node.member_anchors
        return cls(
            anchors=anchors,
            filtered=frozenset(filtered),
            extras_by_path=extras_by_path,
        )


@dc.dataclass(slots=True)
class _Scope:
    """Where the text being resolved lives, for warning locations."""

    node: DocNode
    context: str
    line: int | None
    warnings: list[ReferenceWarning]

    def warn(
        self, text: str, kind: str, reason: WarningReason = "undefined"
    ) -> None:
        self.warnings.append(
            ReferenceWarning(
                reference_text=text,
                kind=kind,
                node_id=self.node.id,
                context=self.context,
                source_path=self.node.source_path,
                source_line=self.line,
                reason=reason,
            )
        )


class ReferenceResolver:
    """Resolve reference markers for one output format."""

    def __init__(
        self,
        index: ReferenceIndex,
        *,
        extension: str = ".html",
        skip_warnings_on: cabc.Iterable[str] = (),
    ) -> None:
        """Initialize the resolver.

        Parameters
        ----------
        index : ReferenceIndex
            Targets references may resolve to.
        extension : str, optional
            Suffix of generated pages (``".html"`` or ``".xhtml"``).
        skip_warnings_on : Iterable[str], optional
            Node ids whose warnings are dropped. Matching is exact.
        """
        self.index = index
        self.extension = extension
        self.skip_warnings_on = frozenset(skip_warnings_on)

    def resolve_all(
        self, nodes: cabc.Iterable[DocNode]
    ) -> tuple[list[DocNode], list[ReferenceWarning]]:
        """Resolve every node in order, returning new nodes and all warnings."""
        resolved: list[DocNode] = []
        warnings: list[ReferenceWarning] = []
        for node in nodes:
            new_node, node_warnings = self.resolve_node(node)
            resolved.append(new_node)
            warnings.extend(node_warnings)
        return resolved, warnings

    def resolve_node(self, node: DocNode) -> tuple[DocNode, list[ReferenceWarning]]:
        """Return ``node`` with its content rewritten, plus its warnings."""
        warnings: list[ReferenceWarning] = []
        scope = _Scope(node, node.id, node.source_line, warnings)
        content = self._resolve_links(node, self._resolve_html(node.content, scope))
        summary = self._resolve_html(node.summary, _Scope(node, node.id, None, []))
        specs = tuple(self._resolve_spec(spec, scope) for spec in node.specs)

        members: list[DocMember] = []
        for member in node.members:
            member_scope = _Scope(
                node,
                member.qualified(node.id),
                member.source_line or node.source_line,
                warnings,
            )
            members.append(
                dc.replace(
                    member,
                    content=self._resolve_html(member.content, member_scope),
                    specs=tuple(
                        self._resolve_spec(spec, member_scope) for spec in member.specs
                    ),
                )
            )

        if node.id in self.skip_warnings_on:
            warnings = []
        resolved = dc.replace(
            node,
            content=content,
            summary=summary,
            specs=specs,
            members=tuple(members),
        )
        return resolved, warnings

    def _resolve_html(self, html: str, scope: _Scope) -> str:
        """Link inline code markers found outside existing anchors and ``<pre>``."""
        if not html:
            return html

        def _code(match: re.Match[str]) -> str:
            link = self._marker_link(match.group("text").strip(), scope)
            if link is None:
                return match.group(0)
            href, label = link
            return (
                f'<a href="{href}"><code{match.group("attrs")}>{label}</code></a>'
            )

        return _outside(SKIP_PATTERN, html, lambda text: CODE_PATTERN.sub(_code, text))

    def _marker_link(self, text: str, scope: _Scope) -> tuple[str, str] | None:
        """Return ``(href, label)`` for a marker, or None when it stays as code."""
        match = MARKER_PATTERN.match(text)
        if match is None:
            return None
        prefix, module, name, arity = match.group("prefix", "module", "name", "arity")

        if name is None:
            if prefix not in (None, "m"):
                return None
            if self._documented(module):
                return f"{module}{self.extension}", module
            if prefix == "m":
                scope.warn(module, "module")
            return None

        if prefix == "m":
            return None
        kind = MARKER_KINDS[prefix]
        anchor = f"{ANCHOR_PREFIXES[kind]}{name}/{arity}"
        if self._documented(module) and anchor in self.index.anchors[module]:
            return f"{module}{self.extension}#{anchor}", f"{module}.{name}/{arity}"
        scope.warn(f"{module}.{name}/{arity}", kind)
        return None

    def _resolve_spec(self, spec: str, scope: _Scope) -> str:
        """Link remote type calls in a typespec fragment."""

        def _link(text: str) -> str:
            pieces: list[str] = []
            cursor = 0
            for match in REMOTE_TYPE_PATTERN.finditer(text):
                module, name = match.group("module", "name")
                args = _call_arguments(text, match.end())
                pieces.append(text[cursor : match.start()])
                cursor = match.start()
                call = f"{module}.{name}({args})"
                if module in self.index.filtered:
                    scope.warn(call, "type", "filtered-module")
                    continue
                if not self._documented(module):
                    continue
                anchor = f"t:{name}/{_arity(args)}"
                if anchor not in self.index.anchors[module]:
                    scope.warn(f"{module}.{name}/{_arity(args)}", "type")
                    continue
                href = f"{module}{self.extension}#{anchor}"
                pieces.append(f'<a href="{href}">{module}.{name}</a>')
                cursor = match.end() - 1
            pieces.append(text[cursor:])
            return "".join(pieces)

        return _outside(SKIP_PATTERN, spec, _link)

    def _resolve_links(self, node: DocNode, html: str) -> str:
        """Point relative links at other extras' generated pages."""
        if not node.source_path or not self.index.extras_by_path or not html:
            return html
        base_dir = posixpath.dirname(posixpath.normpath(node.source_path))

        def _href(match: re.Match[str]) -> str:
            rewritten = self._rewrite_relative(match.group("target"), base_dir)
            if rewritten is None:
                return match.group(0)
            return f'href="{rewritten}"'

        return HREF_PATTERN.sub(_href, html)

    def _rewrite_relative(self, target: str, base_dir: str) -> str | None:
        """Return the generated page for a relative link, if it names an extra."""
        if target.startswith(("#", "/")) or ":" in target:
            return None
        parsed = urlsplit(target)
        if parsed.scheme or parsed.netloc or not parsed.path:
            return None
        joined = posixpath.normpath(posixpath.join(base_dir, parsed.path))
        extra_id = self.index.extras_by_path.get(joined)
        if extra_id is None:
            return None
        url = f"{extra_id}{self.extension}"
        if parsed.fragment:
            url = f"{url}#{parsed.fragment}"
        return url

    def _documented(self, module: str) -> bool:
        return module in self.index.anchors


def report_warnings(warnings: cabc.Iterable[ReferenceWarning]) -> int:
    """Write each distinct warning once to the diagnostic stream.

    Returns
    -------
    int
        Number of warnings written.
    """
    seen: set[ReferenceWarning] = set()
    for warning in warnings:
        if warning in seen:
            continue
        seen.add(warning)
        logger.warning(warning.format())
    return len(seen)


def _outside(
    pattern: re.Pattern[str], html: str, transform: cabc.Callable[[str], str]
) -> str:
    """Apply ``transform`` to the parts of ``html`` not matched by ``pattern``."""
    pieces: list[str] = []
    cursor = 0
    for match in pattern.finditer(html):
        pieces.append(transform(html[cursor : match.start()]))
        pieces.append(match.group(0))
        cursor = match.end()
    pieces.append(transform(html[cursor:]))
    return "".join(pieces)


def _call_arguments(text: str, start: int) -> str:
    """Return the text between the paren opened before ``start`` and its match."""
    depth = 1
    index = start
    while index < len(text) and depth:
        char = text[index]
        if char in "([{":
            depth += 1
        elif char in ")]}":
            depth -= 1
        index += 1
    end = index - 1 if depth == 0 else len(text)
    return text[start:end]


def _arity(args: str) -> int:
    """Count top-level comma-separated arguments."""
    if not args.strip():
        return 0
    depth = 0
    count = 1
    for char in args:
        if char in "([{":
            depth += 1
        elif char in ")]}":
            depth -= 1
        elif char == "," and depth == 0:
            count += 1
    return count


__all__ = [
    "ReferenceIndex",
    "ReferenceResolver",
    "report_warnings",
]
