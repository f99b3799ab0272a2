"""Turn configured extra files into documentation nodes.

Extras are free-form pages (guides, ``README.md``, ``LICENSE``) listed in the
build configuration. Each becomes a :class:`~refdocs.models.DocNode` of kind
``"extra"`` whose id is the slug of its file name (or the configured
``filename``), disambiguated in first-seen order. The API reference page is
an extra too; it is placed first unless the list holds the literal
``api-reference`` entry.
"""

from __future__ import annotations

import collections.abc as cabc
import typing as typ
from pathlib import Path

from refdocs._constants import (
    API_REFERENCE_ID,
    API_REFERENCE_TITLE,
    INDEX_ID,
    NOT_FOUND_ID,
)
from refdocs.errors import ConfigError
from refdocs.generator.renderer import HtmlContentRenderer, RenderedDocument
from refdocs.models import DocNode, HeaderEntry
from refdocs.slugs import UniqueIdAllocator, slugify, strip_tags

if typ.TYPE_CHECKING:
    from refdocs.config import BuildConfig, ExtraConfig

MARKDOWN_SUFFIXES = frozenset({".md", ".markdown", ".livemd", ".cheatmd"})
LIVEBOOK_SUFFIX = ".livemd"


def build_extras(
    config: BuildConfig,
    nodes: cabc.Sequence[DocNode] = (),
    *,
    renderer: HtmlContentRenderer | None = None,
    reserved: cabc.Iterable[str] = (),
) -> list[DocNode]:
    """Read, render and identify every configured extra, in display order.

    Parameters
    ----------
    config : BuildConfig
        Supplies the extras list and the API reference toggle.
    nodes : Sequence[DocNode], optional
        Modules and tasks of the build, used to outline the API reference.
    renderer : HtmlContentRenderer, optional
        Markdown renderer; a default one is created when omitted.
    reserved : Iterable[str], optional
        Extra page ids the calling backend writes itself, such as the EPUB
        ``nav`` document; extras claiming them get a numbered id instead.

    Returns
    -------
    list[DocNode]
        Extras (API reference included when enabled) in display order.

    Raises
    ------
    ConfigError
        If an extra file is missing or yields no usable id.
    """
    renderer = renderer or HtmlContentRenderer()
    taken = {INDEX_ID, NOT_FOUND_ID, *reserved}
    if config.api_reference:
        taken.add(API_REFERENCE_ID)
    allocator = UniqueIdAllocator(taken)

    extras: list[DocNode] = []
    positioned = False
    for entry in config.extras:
        if entry.is_api_reference:
            if config.api_reference and not positioned:
                extras.append(api_reference_node(nodes))
                positioned = True
            continue
        extras.append(_build_extra(entry, config.source_root, allocator, renderer))

    if config.api_reference and not positioned:
        extras.insert(0, api_reference_node(nodes))
    return extras


def api_reference_node(nodes: cabc.Iterable[DocNode] = ()) -> DocNode:
    """Return the API reference page node, outlined by the kinds present."""
    kinds = {node.kind for node in nodes}
    headers = []
    if "module" in kinds:
        headers.append(HeaderEntry(anchor="modules", text="Modules"))
    if "task" in kinds:
        headers.append(HeaderEntry(anchor="tasks", text="Tasks"))
    return DocNode(
        id=API_REFERENCE_ID,
        title=API_REFERENCE_TITLE,
        kind="extra",
        headers=tuple(headers),
    )


def _build_extra(
    entry: ExtraConfig,
    root: Path,
    allocator: UniqueIdAllocator,
    renderer: HtmlContentRenderer,
) -> DocNode:
    path = entry.path
    if not path.is_file():
        msg = f"Extra file '{path}' not found."
        raise ConfigError(msg)

    source = path.read_text(encoding="utf-8")
    if path.suffix.lower() in MARKDOWN_SUFFIXES:
        rendered = renderer.markdown(source)
    else:
        rendered = renderer.plain_text(source)

    base = slugify(entry.filename or path.stem)
    if not base:
        msg = f"Extra '{path}' does not produce a usable filename; set 'filename'."
        raise ConfigError(msg)

    return DocNode(
        id=allocator.allocate(base),
        title=entry.title or _title(rendered, path),
        kind="extra",
        group=entry.group,
        content=rendered.html,
        headers=rendered.headers,
        source_path=display_path(path, root),
    )


def _title(rendered: RenderedDocument, path: Path) -> str:
    if rendered.title:
        return strip_tags(rendered.title).strip() or path.stem
    return path.stem


def display_path(path: Path, root: Path) -> str:
    """Return ``path`` relative to ``root`` when it lies inside it, else absolute."""
    resolved = path.resolve()
    try:
        return resolved.relative_to(root.resolve()).as_posix()
    except ValueError:
        return resolved.as_posix()


__all__ = [
    "LIVEBOOK_SUFFIX",
    "MARKDOWN_SUFFIXES",
    "api_reference_node",
    "build_extras",
    "display_path",
]
