"""Utility helpers shared by the refdocs configuration loader."""

from __future__ import annotations

import collections.abc as cabc
import re
import typing as typ
from pathlib import Path

from refdocs.errors import ConfigError

from .models import ExtraConfig, GroupMember, GroupRule


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _string_tuple(value: object | None, *, field: str) -> tuple[str, ...]:
    """Normalize a scalar or list into a tuple of non-empty strings."""
    match value:
        case None:
            return ()
        case str():
            return (value,) if value.strip() else ()
        case cabc.Sequence():
            return tuple(str(item) for item in value if str(item).strip())
        case _:
            msg = f"'{field}' must be a string or a list of strings."
            raise ConfigError(msg)


def _resolve_path(value: object | None, base_dir: Path | None) -> Path | None:
    """Return ``value`` as a Path, anchored at ``base_dir`` when relative."""
    text = _optional_str(value)
    if text is None:
        return None
    path = Path(text).expanduser()
    if base_dir is not None and not path.is_absolute():
        return base_dir / path
    return path


def _compile_pattern(value: object, *, field: str) -> re.Pattern[str]:
    """Compile ``value`` into a regex, reporting the offending field on failure."""
    if isinstance(value, re.Pattern):
        return value
    try:
        return re.compile(str(value))
    except re.error as exc:
        msg = f"Invalid pattern {value!r} in '{field}': {exc}"
        raise ConfigError(msg) from exc


def _group_member(value: object, *, field: str) -> GroupMember:
    """Return an exact-name member or a compiled pattern member."""
    match value:
        case re.Pattern():
            return value
        case {"pattern": pattern}:
            return _compile_pattern(pattern, field=field)
        case str():
            return value
        case _:
            msg = f"Group members in '{field}' must be names or {{pattern: ...}}."
            raise ConfigError(msg)


def _build_group_rules(value: object | None, *, field: str) -> tuple[GroupRule, ...]:
    """Build ordered group rules from a mapping or a list of one-key mappings."""
    if not value:
        return ()
    pairs: list[tuple[object, object]] = []
    match value:
        case cabc.Mapping():
            pairs.extend(value.items())
        case cabc.Sequence() if not isinstance(value, str):
            for entry in value:
                if not isinstance(entry, cabc.Mapping) or len(entry) != 1:
                    msg = f"Entries in '{field}' must map one group name to members."
                    raise ConfigError(msg)
                pairs.extend(entry.items())
        case _:
            msg = f"'{field}' must map group names to member lists."
            raise ConfigError(msg)

    rules: list[GroupRule] = []
    for name, members in pairs:
        items = members if isinstance(members, list | tuple) else [members]
        rules.append(
            GroupRule(
                name=str(name),
                members=tuple(_group_member(item, field=field) for item in items),
            )
        )
    return tuple(rules)


def _build_extra(value: object, base_dir: Path | None) -> ExtraConfig:
    """Build one ExtraConfig from a bare path or a path with overrides."""
    match value:
        case ExtraConfig():
            return value
        case str() | Path():
            return ExtraConfig(path=_extra_path(value, base_dir))
        case {"path": path, **overrides}:
            return _extra_with_overrides(path, overrides, base_dir)
        case cabc.Mapping() if len(value) == 1:
            ((path, overrides),) = value.items()
            return _extra_with_overrides(path, overrides or {}, base_dir)
        case _:
            msg = f"Unsupported extras entry: {value!r}"
            raise ConfigError(msg)


def _extra_with_overrides(
    path: object, overrides: typ.Mapping[str, typ.Any], base_dir: Path | None
) -> ExtraConfig:
    if not isinstance(overrides, cabc.Mapping):
        msg = f"Overrides for extra '{path}' must be a mapping."
        raise ConfigError(msg)
    unknown = set(overrides) - {"filename", "title", "group"}
    if unknown:
        msg = f"Unknown option(s) for extra '{path}': {', '.join(sorted(unknown))}"
        raise ConfigError(msg)
    return ExtraConfig(
        path=_extra_path(path, base_dir),
        filename=_optional_str(overrides.get("filename")),
        title=_optional_str(overrides.get("title")),
        group=_optional_str(overrides.get("group")) or "",
    )


def _extra_path(value: object, base_dir: Path | None) -> Path:
    """Resolve an extra path, leaving the ``api-reference`` marker untouched."""
    text = str(value)
    if text == "api-reference":
        return Path(text)
    resolved = _resolve_path(text, base_dir)
    if resolved is None:
        msg = "Extras entries need a path."
        raise ConfigError(msg)
    return resolved


def _build_extras(value: object | None, base_dir: Path | None) -> tuple[ExtraConfig, ...]:
    """Build the ordered extras list from configuration."""
    if not value:
        return ()
    if isinstance(value, str) or not isinstance(value, cabc.Sequence):
        msg = "'extras' must be a list."
        raise ConfigError(msg)
    return tuple(_build_extra(entry, base_dir) for entry in value)


__all__ = [
    "_build_extras",
    "_build_group_rules",
    "_compile_pattern",
    "_optional_str",
    "_resolve_path",
    "_string_tuple",
]
