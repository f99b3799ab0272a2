"""Typed dataclasses describing a refdocs build configuration."""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import re
import typing as typ
from pathlib import Path

from refdocs._constants import (
    ALLOWED_LOGO_SUFFIXES,
    API_REFERENCE_ID,
    GENERATOR_NAME,
    INDEX_ID,
    MANIFEST_NAMES,
)
from refdocs.errors import ConfigError
from refdocs.injection import Injection, Static

if typ.TYPE_CHECKING:
    from refdocs.models import DocNode

GroupMember = str | re.Pattern[str]


@dc.dataclass(slots=True, frozen=True)
class ExtraConfig:
    """An extra page read from disk, with optional overrides.

    Attributes
    ----------
    path : Path
        Source file (``.md``, ``.livemd``, ``.cheatmd``, ``.txt`` or
        extension-less). The literal ``api-reference`` marks where the API
        reference page goes.
    filename : str | None
        Output id replacing the slug derived from the file name.
    title : str | None
        Title replacing the one extracted from the file.
    group : str
        Sidebar group for this page.
    """

    path: Path
    filename: str | None = None
    title: str | None = None
    group: str = ""

    @property
    def is_api_reference(self) -> bool:
        """Return whether this entry positions the API reference page."""
        return self.path.as_posix() == API_REFERENCE_ID


@dc.dataclass(slots=True, frozen=True)
class GroupRule:
    """Assign nodes to a named group by exact name or regex pattern."""

    name: str
    members: tuple[GroupMember, ...]

    def matches(self, *candidates: str | None) -> bool:
        """Return whether any member matches any non-empty candidate."""
        values = [value for value in candidates if value]
        for member in self.members:
            if isinstance(member, re.Pattern):
                if any(member.search(value) for value in values):
                    return True
            elif member in values:
                return True
        return False


@dc.dataclass(slots=True)
class BuildConfig:
    """A fully resolved build definition.

    Paths are absolute or relative to the working directory; the YAML loader
    resolves them against the configuration file first. ``root`` is the
    directory extra files are reported relative to, for "view source" links
    and group rules; the working directory when unset.
    """

    project: str
    version: str = ""
    output: Path = Path("doc")
    formatters: tuple[str, ...] = ("html",)
    canonical: str | None = None
    source_url: str | None = None
    source_ref: str = "main"
    source_url_pattern: str | None = None
    homepage_url: str | None = None
    logo: Path | None = None
    assets: Path | None = None
    authors: tuple[str, ...] = ()
    main: str | None = None
    api_reference: bool = True
    extras: tuple[ExtraConfig, ...] = ()
    groups_for_modules: tuple[GroupRule, ...] = ()
    groups_for_extras: tuple[GroupRule, ...] = ()
    nest_modules_by_prefix: tuple[str, ...] = ()
    before_closing_head_tag: Injection = dc.field(default_factory=Static)
    before_closing_body_tag: Injection = dc.field(default_factory=Static)
    before_closing_footer_tag: Injection = dc.field(default_factory=Static)
    skip_undefined_reference_warnings_on: tuple[str, ...] = ()
    filter_modules: re.Pattern[str] | None = None
    module_sort_key: cabc.Callable[[DocNode], typ.Any] | None = None
    language: str = "en"
    root: Path | None = None

    @property
    def main_page(self) -> str:
        """Return the page the index redirect targets."""
        return self.main or API_REFERENCE_ID

    @property
    def source_root(self) -> Path:
        """Return the directory source paths of extras are relative to."""
        return self.root if self.root is not None else Path.cwd()

    @property
    def title(self) -> str:
        """Return ``"<project> v<version>"`` or just the project name."""
        if self.version:
            return f"{self.project} v{self.version}"
        return self.project

    def source_link(self, path: str | None, line: int | None = None) -> str | None:
        """Return the "view source" URL for ``path`` at ``line``, if configured."""
        if not path:
            return None
        pattern = self.source_url_pattern
        if not pattern and self.source_url:
            base = self.source_url.rstrip("/")
            pattern = f"{base}/blob/{self.source_ref}/{{path}}#L{{line}}"
        if not pattern:
            return None
        return pattern.format(path=path.removeprefix("./"), line=line or 1)

    def is_filtered(self, module_id: str) -> bool:
        """Return whether ``module_id`` is excluded by ``filter_modules``."""
        return bool(self.filter_modules and self.filter_modules.search(module_id))

    def validate(self) -> None:
        """Raise :class:`ConfigError` for settings that must abort the build."""
        if self.main == INDEX_ID:
            msg = (
                '"main" cannot be set to "index", otherwise it will recursively '
                "link to itself"
            )
            raise ConfigError(msg)
        if self.logo is not None:
            if self.logo.suffix.lower() not in ALLOWED_LOGO_SUFFIXES:
                allowed = ", ".join(ALLOWED_LOGO_SUFFIXES)
                msg = f"image format not recognized, allowed formats are: {allowed}"
                raise ConfigError(msg)
            if not self.logo.is_file():
                msg = f"Logo file '{self.logo}' not found."
                raise ConfigError(msg)
        unknown = [name for name in self.formatters if name not in MANIFEST_NAMES]
        if unknown:
            known = ", ".join(sorted(MANIFEST_NAMES))
            msg = f"Unknown formatter(s) {', '.join(unknown)}; known: {known}"
            raise ConfigError(msg)
        if not self.project.strip():
            msg = f"{GENERATOR_NAME} needs a project name."
            raise ConfigError(msg)


__all__ = ["BuildConfig", "ConfigError", "ExtraConfig", "GroupMember", "GroupRule"]
