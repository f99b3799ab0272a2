"""Paged-site backend: one HTML document per node plus shared assets.

Output layout::

    doc/
      .build                        manifest of generated paths
      index.html                    redirect to the main page
      404.html
      api-reference.html
      <id>.html                     one per module, task and extra
      <id>.livemd                   source of each Livebook extra
      dist/html-<hash>.css
      dist/html-<hash>.js
      dist/sidebar_items-<hash>.js  ``sidebarNodes={...}``
      assets/logo.png
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

from loguru import logger

from refdocs._constants import (
    ASSETS_DIR,
    DIST_DIR,
    INDEX_ID,
    MANIFEST_NAMES,
    NOT_FOUND_ID,
)
from refdocs.extras import LIVEBOOK_SUFFIX
from refdocs.generator import AssetNames, HtmlContentRenderer, PageRenderer
from refdocs.navigation_index import content_hash, to_json
from refdocs.reconciler import OutputReconciler

from .common import prepare_corpus, run_parallel

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from refdocs.config import BuildConfig
    from refdocs.models import DocNode, NavigationModel

FORMAT = "html"
ASSET_SOURCES = Path(__file__).resolve().parents[1] / "assets" / FORMAT


def run(
    config: BuildConfig,
    nodes: cabc.Sequence[DocNode],
    *,
    renderer: HtmlContentRenderer | None = None,
    report: bool = True,
) -> Path:
    """Generate the HTML site for ``nodes`` into ``config.output``.

    Parameters
    ----------
    config : BuildConfig
        Build definition.
    nodes : Sequence[DocNode]
        Extracted modules and tasks.
    renderer : HtmlContentRenderer, optional
        Renderer for extra pages and highlighted code styles.
    report : bool, optional
        Whether to write reference warnings to the diagnostic stream.

    Returns
    -------
    Path
        The output directory.

    Raises
    ------
    ConfigError
        Before any file is written, when the configuration is invalid.
    OSError
        When writing fails; the previous manifest is left untouched.
    """
    content_renderer = renderer or HtmlContentRenderer()
    corpus = prepare_corpus(
        config, nodes, extension=".html", renderer=content_renderer, report=report
    )

    reconciler = OutputReconciler(config.output, manifest_name=MANIFEST_NAMES[FORMAT])
    reconciler.setup()
    assets = write_assets(reconciler, corpus.navigation, content_renderer)
    logo = copy_logo(reconciler, config)
    if config.assets is not None:
        reconciler.copy_tree(config.assets, ASSETS_DIR)

    pages = PageRenderer(
        config, corpus.navigation, fmt=FORMAT, assets=assets, logo=logo
    )

    def _write(node: DocNode) -> Path:
        return reconciler.write_text(f"{node.id}.html", pages.render(node))

    run_parallel(_write, corpus.nodes)
    copy_livebooks(reconciler, config, corpus.navigation)
    write_redirect(reconciler, pages, corpus.navigation)
    reconciler.write_text(
        f"{NOT_FOUND_ID}.html",
        pages.render_template("not_found.html", page_title="Page not found"),
    )
    reconciler.finalize()
    return config.output


def write_assets(
    reconciler: OutputReconciler,
    navigation: NavigationModel,
    renderer: HtmlContentRenderer,
) -> AssetNames:
    """Write the stylesheet, script and sidebar index under content-addressed names."""
    css = (ASSET_SOURCES / "app.css").read_text(encoding="utf-8")
    css = f"{css}\n{renderer.stylesheet}\n"
    js = (ASSET_SOURCES / "app.js").read_text(encoding="utf-8")
    sidebar = f"sidebarNodes={to_json(navigation)}\n"

    names = AssetNames(
        css=f"{DIST_DIR}/html-{content_hash(css)}.css",
        js=f"{DIST_DIR}/html-{content_hash(js)}.js",
        sidebar=f"{DIST_DIR}/sidebar_items-{content_hash(sidebar)}.js",
    )
    reconciler.write_text(names.css, css)
    reconciler.write_text(names.js, js)
    reconciler.write_text(names.sidebar, sidebar)
    return names


def copy_livebooks(
    reconciler: OutputReconciler, config: BuildConfig, navigation: NavigationModel
) -> list[Path]:
    """Publish the source of every ``.livemd`` extra next to its page."""
    copied: list[Path] = []
    for node in navigation.nodes("extra"):
        if not node.source_path or not node.source_path.endswith(LIVEBOOK_SUFFIX):
            continue
        source = config.source_root / node.source_path
        copied.append(reconciler.copy_file(source, f"{node.id}{LIVEBOOK_SUFFIX}"))
    return copied


def copy_logo(
    reconciler: OutputReconciler, config: BuildConfig, *, prefix: str = ""
) -> str | None:
    """Copy the configured logo to ``assets/logo.<ext>`` and return its path."""
    if config.logo is None:
        return None
    relative = f"{ASSETS_DIR}/logo{config.logo.suffix.lower()}"
    reconciler.copy_file(config.logo, f"{prefix}{relative}")
    return relative


def write_redirect(
    reconciler: OutputReconciler, pages: PageRenderer, navigation: NavigationModel
) -> None:
    """Write ``index.html`` pointing at the main page, warning if it is missing."""
    target = navigation.main
    if not navigation.has_page(target):
        logger.warning(
            f"{INDEX_ID}.html redirects to {target}.html, which does not exist"
        )
    reconciler.write_text(
        f"{INDEX_ID}.html", pages.render_template("redirect.html", target=target)
    )


__all__ = ["copy_livebooks", "copy_logo", "run", "write_assets", "write_redirect"]
