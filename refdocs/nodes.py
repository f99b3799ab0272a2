"""Load extracted documentation nodes from a YAML or JSON file.

The extraction stage lives outside refdocs; it hands over a file shaped like::

    nodes:
      - id: Foo.Bar
        kind: module
        summary: "<p>Bars things.</p>"
        content: "<p>Bars things.</p><h2 id=\\"usage\\">Usage</h2>..."
        source_path: lib/foo/bar.ex
        source_line: 1
        members:
          - {kind: function, name: bar, arity: 1, signature: "bar(x)"}

JSON is accepted as well since it is a subset of YAML 1.2.
"""

from __future__ import annotations

import collections.abc as cabc
import re
import typing as typ

from ruamel.yaml import YAML

from refdocs.errors import ConfigError
from refdocs.models import NODE_KINDS, DocMember, DocNode, HeaderEntry
from refdocs.slugs import strip_tags

if typ.TYPE_CHECKING:
    from pathlib import Path

MEMBER_KINDS = frozenset({"function", "macro", "type", "callback"})
H2_PATTERN = re.compile(
    r'<h2\b[^>]*\bid="(?P<anchor>[^"]+)"[^>]*>(?P<text>.*?)</h2>', re.DOTALL
)


def load_nodes(path: Path) -> list[DocNode]:
    """Read the node list stored at ``path``.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    ConfigError
        If the file does not describe a list of nodes.
    """
    if not path.exists():
        msg = f"Nodes file '{path}' not found."
        raise FileNotFoundError(msg)
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or []
    return parse_nodes(loaded)


def parse_nodes(raw: object) -> list[DocNode]:
    """Build nodes from a list, or a mapping holding the list under ``nodes``."""
    entries = raw.get("nodes", []) if isinstance(raw, cabc.Mapping) else raw
    if isinstance(entries, str) or not isinstance(entries, cabc.Sequence):
        msg = "Nodes must be a list of mappings."
        raise ConfigError(msg)
    return [_node(entry) for entry in entries]


def extract_headers(html: str) -> tuple[HeaderEntry, ...]:
    """Return the anchored level-two headings of ``html`` in document order."""
    return tuple(
        HeaderEntry(
            anchor=match.group("anchor"),
            text=" ".join(strip_tags(match.group("text")).split()),
        )
        for match in H2_PATTERN.finditer(html)
    )


def _node(entry: object) -> DocNode:
    if not isinstance(entry, cabc.Mapping) or not entry.get("id"):
        msg = f"Each node needs at least an 'id': {entry!r}"
        raise ConfigError(msg)
    node_id = str(entry["id"])
    kind = str(entry.get("kind", "module"))
    if kind not in NODE_KINDS:
        msg = f"Node '{node_id}' has unknown kind '{kind}'."
        raise ConfigError(msg)

    content = str(entry.get("content") or "")
    headers = entry.get("headers")
    return DocNode(
        id=node_id,
        title=str(entry.get("title") or node_id),
        kind=typ.cast("typ.Any", kind),
        group=str(entry.get("group") or ""),
        content=content,
        headers=(
            tuple(_header(item, node_id) for item in headers)
            if headers is not None
            else extract_headers(content)
        ),
        source_path=_optional(entry.get("source_path")),
        source_line=_optional_int(entry.get("source_line")),
        summary=str(entry.get("summary") or ""),
        members=tuple(_member(item, node_id) for item in entry.get("members") or ()),
        specs=tuple(str(spec) for spec in entry.get("specs") or ()),
        deprecated=_optional(entry.get("deprecated")),
    )


def _member(entry: object, node_id: str) -> DocMember:
    match entry:
        case {"kind": str() as kind, "name": str() as name, "arity": int() as arity}:
            pass
        case _:
            msg = f"Members of '{node_id}' need 'kind', 'name' and 'arity': {entry!r}"
            raise ConfigError(msg)
    if kind not in MEMBER_KINDS:
        msg = f"Member '{name}/{arity}' of '{node_id}' has unknown kind '{kind}'."
        raise ConfigError(msg)
    return DocMember(
        kind=typ.cast("typ.Any", kind),
        name=name,
        arity=arity,
        content=str(entry.get("content") or ""),
        signature=str(entry.get("signature") or ""),
        specs=tuple(str(spec) for spec in entry.get("specs") or ()),
        source_line=_optional_int(entry.get("source_line")),
    )


def _header(entry: object, node_id: str) -> HeaderEntry:
    match entry:
        case {"anchor": anchor, "text": text}:
            return HeaderEntry(anchor=str(anchor), text=str(text))
        case _:
            msg = f"Headers of '{node_id}' need 'anchor' and 'text': {entry!r}"
            raise ConfigError(msg)


def _optional(value: object) -> str | None:
    return str(value) if value not in (None, "") else None


def _optional_int(value: object) -> int | None:
    if value is None:
        return None
    try:
        return int(typ.cast("typ.Any", value))
    except (TypeError, ValueError) as exc:
        msg = f"Expected a line number, got {value!r}"
        raise ConfigError(msg) from exc


__all__ = ["extract_headers", "load_nodes", "parse_nodes"]
