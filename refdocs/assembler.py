"""Group, nest, sort and paginate documentation nodes into one navigation model.

The assembler is format-agnostic: it decides which sidebar group every node
belongs to, which configured prefix a module nests under, the order nodes
appear in, and the previous/next links between the API reference and extra
pages. Both the HTML and the EPUB backends render from the same
:class:`~refdocs.models.NavigationModel`.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import typing as typ

from refdocs.models import NavGroup, NavigationModel, PageEntry, PageLink

if typ.TYPE_CHECKING:
    from refdocs.config import BuildConfig, GroupRule
    from refdocs.models import DocNode, NodeKind


def assemble(nodes: cabc.Iterable[DocNode], config: BuildConfig) -> NavigationModel:
    """Build the navigation model for ``nodes``.

    Parameters
    ----------
    nodes : Iterable[DocNode]
        Resolved modules, tasks and extras. Extras (the API reference page
        included) must already be in display order.
    config : BuildConfig
        Supplies nesting prefixes, group rules, the sort key and ``main``.

    Returns
    -------
    NavigationModel
        Groups per kind plus the paginated page sequence.

    Raises
    ------
    ConfigError
        If the configuration is invalid, for example when ``main`` names the
        redirect index page.
    """
    config.validate()

    by_kind: dict[NodeKind, list[DocNode]] = {"module": [], "task": [], "extra": []}
    for node in nodes:
        by_kind[node.kind].append(node)

    prefixes = _normalise_prefixes(config.nest_modules_by_prefix)
    modules = [
        _grouped(_nested(node, prefixes), config.groups_for_modules, node.id)
        for node in by_kind["module"]
    ]
    tasks = [
        _grouped(_nested(node, prefixes), config.groups_for_modules, node.id)
        for node in by_kind["task"]
    ]
    extras = [
        _grouped_extra(node, config.groups_for_extras) for node in by_kind["extra"]
    ]

    sort_key = config.module_sort_key or _default_sort_key
    extra_groups = _group(extras, config.groups_for_extras, sort_key=None)
    return NavigationModel(
        modules=_group(modules, config.groups_for_modules, sort_key=sort_key),
        tasks=_group(tasks, config.groups_for_modules, sort_key=sort_key),
        extras=extra_groups,
        pages=_paginate([node for group in extra_groups for node in group.nodes]),
        main=config.main_page,
    )


def _default_sort_key(node: DocNode) -> str:
    return node.id


def _normalise_prefixes(prefixes: cabc.Iterable[str]) -> list[str]:
    """Return prefixes without trailing dots, longest first."""
    cleaned = {prefix.rstrip(".") for prefix in prefixes if prefix.rstrip(".")}
    return sorted(cleaned, key=lambda prefix: (-len(prefix), prefix))


def _nested(node: DocNode, prefixes: cabc.Sequence[str]) -> DocNode:
    """Attach the longest configured prefix matching on a segment boundary."""
    for prefix in prefixes:
        if node.id.startswith(f"{prefix}."):
            return dc.replace(
                node,
                nested_context=prefix,
                nested_title=node.id[len(prefix) + 1 :],
            )
    return node


def _rule_for(rules: cabc.Sequence[GroupRule], *candidates: str | None) -> str | None:
    """Return the name of the first rule matching any candidate."""
    for rule in rules:
        if rule.matches(*candidates):
            return rule.name
    return None


def _grouped(node: DocNode, rules: cabc.Sequence[GroupRule], name: str) -> DocNode:
    group = _rule_for(rules, name)
    if group is None or group == node.group:
        return node
    return dc.replace(node, group=group)


def _grouped_extra(node: DocNode, rules: cabc.Sequence[GroupRule]) -> DocNode:
    """Group an extra by its own setting, else by rules on its path or id."""
    if node.group:
        return node
    group = _rule_for(rules, node.source_path, node.id)
    if group is None:
        return node
    return dc.replace(node, group=group)


def _group(
    nodes: cabc.Sequence[DocNode],
    rules: cabc.Sequence[GroupRule],
    *,
    sort_key: cabc.Callable[[DocNode], typ.Any] | None,
) -> tuple[NavGroup, ...]:
    """Bucket ``nodes`` by group and order both buckets and members."""
    buckets: dict[str, list[DocNode]] = {}
    for node in nodes:
        buckets.setdefault(node.group, []).append(node)

    configured = [rule.name for rule in rules]
    seen = list(buckets)

    def _rank(name: str) -> tuple[int, int]:
        if name == "":
            return (0, 0)
        if name in configured:
            return (1, configured.index(name))
        return (2, seen.index(name))

    groups: list[NavGroup] = []
    for name in sorted(buckets, key=_rank):
        members = buckets[name]
        if sort_key is not None:
            members = sorted(members, key=sort_key)
        groups.append(NavGroup(name=name, nodes=tuple(members)))
    return tuple(groups)


def _paginate(pages: cabc.Sequence[DocNode]) -> tuple[PageEntry, ...]:
    """Link each page to its immediate neighbours."""
    links = [PageLink(id=page.id, title=page.title) for page in pages]
    entries: list[PageEntry] = []
    for position, link in enumerate(links):
        entries.append(
            PageEntry(
                id=link.id,
                title=link.title,
                previous=links[position - 1] if position > 0 else None,
                next=links[position + 1] if position + 1 < len(links) else None,
            )
        )
    return tuple(entries)


__all__ = ["assemble"]
