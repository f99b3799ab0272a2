"""Render documentation nodes into complete pages with Jinja templates.

Examples
--------
>>> from refdocs.generator import AssetNames, PageRenderer
>>> renderer = PageRenderer(config, navigation, assets=AssetNames(css="dist/html.css"))  # doctest: +SKIP
>>> html = renderer.render(navigation.nodes("module")[0])  # doctest: +SKIP
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from refdocs._constants import API_REFERENCE_ID, GENERATOR_NAME, GENERATOR_VERSION
from refdocs.navigation_index import MEMBER_GROUPS

if typ.TYPE_CHECKING:
    from refdocs.config import BuildConfig
    from refdocs.models import DocMember, DocNode, NavigationModel

PAGE_EXTENSIONS = {"html": ".html", "epub": ".xhtml"}


@dc.dataclass(slots=True, frozen=True)
class AssetNames:
    """Output-relative paths of the assets every page references."""

    css: str
    js: str = ""
    sidebar: str = ""


@dc.dataclass(slots=True, frozen=True)
class MemberSection:
    """Members of one kind (types, callbacks or functions) on a module page."""

    key: str
    name: str
    members: tuple[DocMember, ...]


class PageRenderer:
    """Render nodes of one navigation model for one output format."""

    def __init__(
        self,
        config: BuildConfig,
        navigation: NavigationModel,
        *,
        fmt: str = "html",
        assets: AssetNames,
        logo: str | None = None,
        templates_dir: Path | None = None,
    ) -> None:
        """Initialize the renderer and its Jinja environment.

        Parameters
        ----------
        config : BuildConfig
            Project metadata, injection points and source links.
        navigation : NavigationModel
            Assembled navigation shared by every page.
        fmt : str, optional
            ``"html"`` or ``"epub"``; selects the template set and page suffix.
        assets : AssetNames
            Stylesheet, script and sidebar paths referenced from each page.
        logo : str, optional
            Output-relative path of the copied logo.
        templates_dir : Path, optional
            Directory holding one template folder per format; defaults to the
            package templates.
        """
        self.config = config
        self.navigation = navigation
        self.fmt = fmt
        self.assets = assets
        self.logo = logo
        self.extension = PAGE_EXTENSIONS[fmt]
        default_templates = Path(__file__).resolve().parents[1] / "templates"
        self.templates_dir = (templates_dir or default_templates) / fmt
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xhtml", "xml", "opf"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, node: DocNode) -> str:
        """Render the page for ``node``."""
        if node.id == API_REFERENCE_ID:
            template = f"api_reference{self.extension}"
        elif node.kind == "extra":
            template = f"extra{self.extension}"
        else:
            template = f"module{self.extension}"

        return self.render_template(
            template,
            node=node,
            current_id=node.id,
            page_title=node.title,
            page=self.navigation.page(node.id),
            canonical_url=self._canonical_url(node.id),
            source_url=self.config.source_link(node.source_path, node.source_line),
            member_sections=member_sections(node),
            member_sources={
                member.anchor: self.config.source_link(
                    node.source_path, member.source_line
                )
                for member in node.members
            },
        )

    def render_template(self, name: str, **context: object) -> str:
        """Render ``name`` with the shared context plus ``context``.

        Injection points are resolved on every call, so callbacks see each
        rendered document.
        """
        base: dict[str, object] = {
            "config": self.config,
            "navigation": self.navigation,
            "fmt": self.fmt,
            "assets": self.assets,
            "logo": self.logo,
            "generator": f"{GENERATOR_NAME} v{GENERATOR_VERSION}",
            "generator_name": GENERATOR_NAME,
            "injections": {
                "head": self.config.before_closing_head_tag.resolve(self.fmt),
                "body": self.config.before_closing_body_tag.resolve(self.fmt),
                "footer": self.config.before_closing_footer_tag.resolve(self.fmt),
            },
            "current_id": None,
            "page": None,
            "canonical_url": None,
        }
        base.update(context)
        return self.env.get_template(name).render(**base)

    def _canonical_url(self, node_id: str) -> str | None:
        if not self.config.canonical:
            return None
        return f"{self.config.canonical.rstrip('/')}/{node_id}{self.extension}"


def member_sections(node: DocNode) -> list[MemberSection]:
    """Split ``node.members`` into display sections, each sorted by name/arity."""
    sections: list[MemberSection] = []
    for key, name, kinds in MEMBER_GROUPS:
        members = sorted(
            (member for member in node.members if member.kind in kinds),
            key=lambda member: (member.name, member.arity),
        )
        if members:
            sections.append(MemberSection(key=key, name=name, members=tuple(members)))
    return sections


__all__ = ["AssetNames", "MemberSection", "PageRenderer", "member_sections"]
