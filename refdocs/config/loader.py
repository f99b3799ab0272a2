"""Load build configuration YAML (or a plain mapping) into typed dataclasses."""

from __future__ import annotations

import collections.abc as cabc
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from refdocs.errors import ConfigError
from refdocs.injection import coerce_injection

from .helpers import (
    _build_extras,
    _build_group_rules,
    _compile_pattern,
    _optional_str,
    _resolve_path,
    _string_tuple,
)
from .models import BuildConfig

KNOWN_KEYS = frozenset(
    {
        "project",
        "version",
        "output",
        "formatters",
        "canonical",
        "source_url",
        "source_ref",
        "source_url_pattern",
        "homepage_url",
        "logo",
        "assets",
        "authors",
        "main",
        "api_reference",
        "extras",
        "groups_for_modules",
        "groups_for_extras",
        "nest_modules_by_prefix",
        "before_closing_head_tag",
        "before_closing_body_tag",
        "before_closing_footer_tag",
        "skip_undefined_reference_warnings_on",
        "filter_modules",
        "module_sort_key",
        "language",
    }
)


def load_build_config(
    path: Path, *, overrides: typ.Mapping[str, typ.Any] | None = None
) -> BuildConfig:
    """Load the YAML file describing a documentation build.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration (for example,
        ``refdocs.yaml``). Relative paths inside it are resolved against the
        file's directory.
    overrides : Mapping[str, Any], optional
        Values replacing entries from the file, typically CLI flags.

    Returns
    -------
    BuildConfig
        Parsed configuration ready for :func:`refdocs.generate_docs`.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    ConfigError
        If the top-level structure is not a mapping or a field is invalid.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from refdocs.config import load_build_config
    >>> config = load_build_config(Path("refdocs.yaml"))  # doctest: +SKIP
    >>> config.main_page  # doctest: +SKIP
    'api-reference'
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise ConfigError(msg)
    raw: dict[str, typ.Any] = dict(loaded)
    if overrides:
        raw.update({key: value for key, value in overrides.items() if value is not None})
    return build_config(raw, base_dir=path.resolve().parent)


def build_config(
    raw: typ.Mapping[str, typ.Any], *, base_dir: Path | None = None
) -> BuildConfig:
    """Build a :class:`BuildConfig` from a plain mapping.

    Accepts the same keys as the YAML file, plus Python-only values such as
    callables for the injection points and ``module_sort_key``.
    """
    unknown = set(raw) - KNOWN_KEYS
    if unknown:
        msg = f"Unknown configuration key(s): {', '.join(sorted(unknown))}"
        raise ConfigError(msg)

    project = _optional_str(raw.get("project"))
    if not project:
        msg = "Configuration is missing 'project'."
        raise ConfigError(msg)

    filter_raw = raw.get("filter_modules")
    sort_key = raw.get("module_sort_key")
    if sort_key is not None and not callable(sort_key):
        msg = "'module_sort_key' must be callable."
        raise ConfigError(msg)

    return BuildConfig(
        project=project,
        version=_optional_str(raw.get("version")) or "",
        output=_resolve_path(raw.get("output"), base_dir) or Path("doc"),
        formatters=_string_tuple(raw.get("formatters", "html"), field="formatters"),
        canonical=_optional_str(raw.get("canonical")),
        source_url=_optional_str(raw.get("source_url")),
        source_ref=_optional_str(raw.get("source_ref")) or "main",
        source_url_pattern=_optional_str(raw.get("source_url_pattern")),
        homepage_url=_optional_str(raw.get("homepage_url")),
        logo=_resolve_path(raw.get("logo"), base_dir),
        assets=_resolve_path(raw.get("assets"), base_dir),
        authors=_string_tuple(raw.get("authors"), field="authors"),
        main=_optional_str(raw.get("main")),
        api_reference=bool(raw.get("api_reference", True)),
        extras=_build_extras(raw.get("extras"), base_dir),
        groups_for_modules=_build_group_rules(
            raw.get("groups_for_modules"), field="groups_for_modules"
        ),
        groups_for_extras=_build_group_rules(
            raw.get("groups_for_extras"), field="groups_for_extras"
        ),
        nest_modules_by_prefix=_string_tuple(
            raw.get("nest_modules_by_prefix"), field="nest_modules_by_prefix"
        ),
        before_closing_head_tag=coerce_injection(raw.get("before_closing_head_tag")),
        before_closing_body_tag=coerce_injection(raw.get("before_closing_body_tag")),
        before_closing_footer_tag=coerce_injection(
            raw.get("before_closing_footer_tag")
        ),
        skip_undefined_reference_warnings_on=_string_tuple(
            raw.get("skip_undefined_reference_warnings_on"),
            field="skip_undefined_reference_warnings_on",
        ),
        filter_modules=(
            _compile_pattern(filter_raw, field="filter_modules")
            if filter_raw
            else None
        ),
        module_sort_key=typ.cast("cabc.Callable[..., typ.Any] | None", sort_key),
        language=_optional_str(raw.get("language")) or "en",
        root=base_dir,
    )


__all__ = ["build_config", "load_build_config"]
