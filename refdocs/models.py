"""Shared dataclasses used by the documentation pipeline.

Documentation nodes arrive already extracted and rendered; refdocs only
reads them. Every stage that changes a node (reference resolution, grouping,
nesting) returns a new instance via :func:`dataclasses.replace`, so the
records below are frozen.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

NodeKind = typ.Literal["module", "task", "extra"]
MemberKind = typ.Literal["function", "macro", "type", "callback"]
WarningReason = typ.Literal["undefined", "filtered-module"]

NODE_KINDS: tuple[NodeKind, ...] = ("module", "task", "extra")
MEMBER_ANCHOR_PREFIXES: dict[str, str] = {
    "function": "",
    "macro": "",
    "type": "t:",
    "callback": "c:",
}


@dc.dataclass(slots=True, frozen=True)
class HeaderEntry:
    """Heading extracted from rendered content.

    Attributes
    ----------
    anchor : str
        Fragment identifier of the heading within its page.
    text : str
        Heading label, with inline markup stripped.
    """

    anchor: str
    text: str


@dc.dataclass(slots=True, frozen=True)
class DocMember:
    """A function, macro, type or callback documented inside a module.

    Attributes
    ----------
    kind : str
        One of ``"function"``, ``"macro"``, ``"type"`` or ``"callback"``.
    name : str
        Member name without module prefix.
    arity : int
        Number of arguments.
    content : str
        Rendered HTML documentation.
    signature : str
        Display signature, for example ``"hello(name)"``.
    specs : tuple[str, ...]
        Rendered typespec fragments attached to the member.
    source_line : int | None
        Line of the definition inside the module's source file.
    """

    kind: MemberKind
    name: str
    arity: int
    content: str = ""
    signature: str = ""
    specs: tuple[str, ...] = ()
    source_line: int | None = None

    @property
    def anchor(self) -> str:
        """Return the fragment used to link to this member."""
        return f"{MEMBER_ANCHOR_PREFIXES[self.kind]}{self.name}/{self.arity}"

    def qualified(self, module_id: str) -> str:
        """Return the member reference as written in prose, e.g. ``t:Mod.t/0``."""
        prefix = MEMBER_ANCHOR_PREFIXES[self.kind]
        return f"{prefix}{module_id}.{self.name}/{self.arity}"


@dc.dataclass(slots=True, frozen=True)
class DocNode:
    """One documentable unit: a module, a task, or an extra page.

    Attributes
    ----------
    id : str
        Output identifier, unique within ``kind``; pages land at ``<id>.html``.
    title : str
        Display title used in navigation and ``<title>``.
    kind : str
        ``"module"``, ``"task"`` or ``"extra"``.
    group : str
        Sidebar group; ``""`` is the default bucket.
    nested_context : str | None
        Configured prefix this node nests under, if any.
    nested_title : str | None
        Title with ``nested_context`` removed.
    content : str
        Rendered HTML body.
    headers : tuple[HeaderEntry, ...]
        Headings extracted from ``content``, in document order.
    source_path : str | None
        Source file, relative to the project root, for "view source" links
        and warning locations.
    source_line : int | None
        Line of the definition within ``source_path``.
    summary : str
        Rendered first paragraph, shown on the API reference page.
    members : tuple[DocMember, ...]
        Documented functions, types and callbacks.
    specs : tuple[str, ...]
        Rendered typespec fragments attached to the node itself.
    deprecated : str | None
        Deprecation notice, if any.
    """

    id: str
    title: str
    kind: NodeKind = "module"
    group: str = ""
    nested_context: str | None = None
    nested_title: str | None = None
    content: str = ""
    headers: tuple[HeaderEntry, ...] = ()
    source_path: str | None = None
    source_line: int | None = None
    summary: str = ""
    members: tuple[DocMember, ...] = ()
    specs: tuple[str, ...] = ()
    deprecated: str | None = None

    @property
    def member_anchors(self) -> frozenset[str]:
        """Return every anchor a reference into this node may target."""
        return frozenset(member.anchor for member in self.members)


@dc.dataclass(slots=True, frozen=True)
class ReferenceWarning:
    """A reference that could not be turned into a link.

    Attributes
    ----------
    reference_text : str
        The literal reference, e.g. ``"Warnings.bar/0"``.
    kind : str
        ``"module"``, ``"function"``, ``"type"`` or ``"callback"``.
    node_id : str
        Id of the node whose content holds the reference.
    context : str
        Where inside the node: its id, or a qualified member reference.
    source_path : str | None
        Source file of the referencing node.
    source_line : int | None
        Line of the referencing node or member.
    reason : str
        ``"undefined"`` or ``"filtered-module"``.
    """

    reference_text: str
    kind: str
    node_id: str
    context: str
    source_path: str | None
    source_line: int | None
    reason: WarningReason = "undefined"

    def format(self) -> str:
        """Render the warning the way it is written to the diagnostic stream."""
        if self.reason == "filtered-module":
            headline = f"typespec references filtered module: {self.reference_text}"
        else:
            headline = f"reference to {self.kind} {self.reference_text} is undefined"
        location = self.source_path or "nofile"
        if self.source_line is not None:
            location = f"{location}:{self.source_line}"
        return f"{headline}\n  {location}: {self.context}"


@dc.dataclass(slots=True, frozen=True)
class NavGroup:
    """Named bucket of nodes in display order."""

    name: str
    nodes: tuple[DocNode, ...]


@dc.dataclass(slots=True, frozen=True)
class PageLink:
    """Target of a previous/next link."""

    id: str
    title: str


@dc.dataclass(slots=True, frozen=True)
class PageEntry:
    """A page in the flat reading order with its neighbours."""

    id: str
    title: str
    previous: PageLink | None = None
    next: PageLink | None = None


@dc.dataclass(slots=True, frozen=True)
class NavigationModel:
    """Format-agnostic grouping, ordering and pagination of a corpus.

    Attributes
    ----------
    modules : tuple[NavGroup, ...]
        Module groups, default group first.
    tasks : tuple[NavGroup, ...]
        Task groups, default group first.
    extras : tuple[NavGroup, ...]
        Extra page groups (the API reference included), default group first.
    pages : tuple[PageEntry, ...]
        API reference and extras in reading order with previous/next links.
    main : str
        Id of the page the index redirect points at.
    """

    modules: tuple[NavGroup, ...]
    tasks: tuple[NavGroup, ...]
    extras: tuple[NavGroup, ...]
    pages: tuple[PageEntry, ...]
    main: str

    def nodes(self, kind: NodeKind | None = None) -> list[DocNode]:
        """Return nodes of ``kind`` (all kinds when ``None``) in display order."""
        buckets = {"module": self.modules, "task": self.tasks, "extra": self.extras}
        kinds = [kind] if kind else list(NODE_KINDS)
        return [
            node for name in kinds for group in buckets[name] for node in group.nodes
        ]

    def page(self, node_id: str) -> PageEntry | None:
        """Return the pagination entry for ``node_id`` if it is a page."""
        return next((entry for entry in self.pages if entry.id == node_id), None)

    def has_page(self, node_id: str) -> bool:
        """Return whether any node renders to ``node_id``."""
        return any(node.id == node_id for node in self.nodes())


__all__ = [
    "DocMember",
    "DocNode",
    "HeaderEntry",
    "MemberKind",
    "NavGroup",
    "NavigationModel",
    "NodeKind",
    "PageEntry",
    "PageLink",
    "ReferenceWarning",
]
