"""Serialize the navigation model for client-side sidebars.

The HTML backend embeds the result as ``sidebarNodes={...}`` in a
content-addressed script so browsers never serve a stale sidebar.
"""

from __future__ import annotations

import hashlib
import json
import typing as typ

if typ.TYPE_CHECKING:
    from refdocs.models import DocMember, DocNode, NavigationModel

MEMBER_GROUPS = (
    ("types", "Types", ("type",)),
    ("callbacks", "Callbacks", ("callback",)),
    ("functions", "Functions", ("function", "macro")),
)


def serialize(navigation: NavigationModel) -> dict[str, list[dict[str, typ.Any]]]:
    """Describe every module, task and extra with groups, nesting and headers."""
    return {
        "modules": [_node(node) for node in navigation.nodes("module")],
        "tasks": [_node(node) for node in navigation.nodes("task")],
        "extras": [_node(node) for node in navigation.nodes("extra")],
    }


def to_json(navigation: NavigationModel) -> str:
    """Return :func:`serialize` output as compact, deterministic JSON."""
    return json.dumps(serialize(navigation), ensure_ascii=False, separators=(",", ":"))


def content_hash(data: str | bytes, length: int = 8) -> str:
    """Return the first ``length`` hex digits of the SHA-256 of ``data``."""
    raw = data.encode("utf-8") if isinstance(data, str) else data
    return hashlib.sha256(raw).hexdigest()[:length]


def _node(node: DocNode) -> dict[str, typ.Any]:
    entry: dict[str, typ.Any] = {
        "id": node.id,
        "title": node.title,
        "group": node.group,
        "headers": [
            {"id": header.text, "anchor": header.anchor} for header in node.headers
        ],
    }
    if node.nested_context:
        entry["nested_context"] = node.nested_context
        entry["nested_title"] = node.nested_title
    if node.deprecated:
        entry["deprecated"] = True
    groups = _member_groups(node.members)
    if groups:
        entry["nodeGroups"] = groups
    return entry


def _member_groups(members: tuple[DocMember, ...]) -> list[dict[str, typ.Any]]:
    groups: list[dict[str, typ.Any]] = []
    for key, name, kinds in MEMBER_GROUPS:
        selected = sorted(
            (member for member in members if member.kind in kinds),
            key=lambda member: (member.name, member.arity),
        )
        if selected:
            groups.append(
                {
                    "key": key,
                    "name": name,
                    "nodes": [
                        {"id": f"{member.name}/{member.arity}", "anchor": member.anchor}
                        for member in selected
                    ],
                }
            )
    return groups


__all__ = ["content_hash", "serialize", "to_json"]
