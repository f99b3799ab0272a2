"""Packaged-archive backend: an EPUB 3 book built from the navigation model.

Pages are staged in a temporary ``.refdocs-epub-*`` directory inside the
output, listed in ``content.opf`` with their media types, zipped into
``<output>/<project>.epub`` (with the uncompressed ``mimetype`` entry first,
as readers require) and the staging tree is removed. Only the archive is
recorded in the ``.build-epub`` manifest.
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import os
import re
import tempfile
import typing as typ
import uuid
import zipfile
from pathlib import Path, PurePosixPath

from refdocs._constants import (
    DIST_DIR,
    EPUB_COMPRESSED_SUFFIXES,
    EPUB_MEDIA_TYPES,
    EPUB_MIMETYPE,
    GENERATOR_NAME,
    MANIFEST_NAMES,
)
from refdocs.errors import ConfigError
from refdocs.generator import AssetNames, HtmlContentRenderer, PageRenderer
from refdocs.models import NavGroup
from refdocs.navigation_index import content_hash
from refdocs.reconciler import OutputReconciler

from .common import prepare_corpus, run_parallel
from .html import copy_logo

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from refdocs.config import BuildConfig
    from refdocs.models import DocNode, NavigationModel

    from .common import PreparedCorpus

FORMAT = "epub"
ASSET_SOURCES = Path(__file__).resolve().parents[1] / "assets" / FORMAT
CONTENT_DIR = "OEBPS"
ZIP_TIMESTAMP = (1980, 1, 1, 0, 0, 0)
ITEM_ID_PATTERN = re.compile(r"[^A-Za-z0-9_.-]")
DEFAULT_EXTRAS_GROUP = "Extras"
STAGING_PREFIX = ".refdocs-epub-"
RESERVED_IDS = ("content", "nav", "title")
SOURCE_DATE_ENV = "SOURCE_DATE_EPOCH"


class ManifestItem(typ.NamedTuple):
    """One file listed in ``content.opf``."""

    id: str
    href: str
    media_type: str


class TocSection(typ.NamedTuple):
    """A top-level entry of the table of contents."""

    name: str
    groups: tuple[NavGroup, ...]


def run(
    config: BuildConfig,
    nodes: cabc.Sequence[DocNode],
    *,
    renderer: HtmlContentRenderer | None = None,
    report: bool = True,
) -> Path:
    """Generate ``<output>/<project>.epub`` for ``nodes``.

    Returns
    -------
    Path
        Path of the written archive.

    Raises
    ------
    ConfigError
        Before any file is written, when the configuration is invalid.
    OSError
        When writing fails; the previous manifest is left untouched.
    """
    content_renderer = renderer or HtmlContentRenderer()
    corpus = prepare_corpus(
        config,
        nodes,
        extension=".xhtml",
        renderer=content_renderer,
        report=report,
        reserved=RESERVED_IDS,
    )
    modified = modified_timestamp(config)

    reconciler = OutputReconciler(config.output, manifest_name=MANIFEST_NAMES[FORMAT])
    reconciler.setup()

    archive_name = f"{config.project}.epub"
    archive = config.output / archive_name
    with tempfile.TemporaryDirectory(
        dir=config.output, prefix=STAGING_PREFIX
    ) as staging:
        _stage(Path(staging), config, corpus, content_renderer, modified=modified)
        package(Path(staging), archive)
    reconciler.record(archive_name)
    reconciler.finalize()
    return archive


def _stage(
    staging_dir: Path,
    config: BuildConfig,
    corpus: PreparedCorpus,
    content_renderer: HtmlContentRenderer,
    *,
    modified: dt.datetime,
) -> None:
    """Write every book file under ``staging_dir``."""
    staged = OutputReconciler(staging_dir)

    staged.write_text("mimetype", EPUB_MIMETYPE)
    css = (ASSET_SOURCES / "epub.css").read_text(encoding="utf-8")
    css = f"{css}\n{content_renderer.stylesheet}\n"
    assets = AssetNames(css=f"{DIST_DIR}/epub-{content_hash(css)}.css")
    staged.write_text(f"{CONTENT_DIR}/{assets.css}", css)
    logo = copy_logo(staged, config, prefix=f"{CONTENT_DIR}/")

    pages = PageRenderer(
        config, corpus.navigation, fmt=FORMAT, assets=assets, logo=logo
    )
    staged.write_text("META-INF/container.xml", pages.render_template("container.xml"))
    staged.write_text(
        f"{CONTENT_DIR}/title.xhtml",
        pages.render_template("title.xhtml", page_title=config.title),
    )
    staged.write_text(
        f"{CONTENT_DIR}/nav.xhtml",
        pages.render_template("nav.xhtml", toc=table_of_contents(corpus.navigation)),
    )

    def _write(node: DocNode) -> Path:
        return staged.write_text(f"{CONTENT_DIR}/{node.id}.xhtml", pages.render(node))

    run_parallel(_write, corpus.nodes)

    items = manifest_items(staged.written)
    cover_id = _item_id(logo) if logo else None
    staged.write_text(
        f"{CONTENT_DIR}/content.opf",
        pages.render_template(
            "content.opf",
            items=items,
            spine=[
                "title",
                "nav",
                *(
                    _item_id(f"{node.id}.xhtml")
                    for node in reading_order(corpus.navigation)
                ),
            ],
            identifier=book_identifier(config),
            modified=modified.strftime("%Y-%m-%dT%H:%M:%SZ"),
            cover_id=cover_id,
        ),
    )


def reading_order(navigation: NavigationModel) -> list[DocNode]:
    """Return pages in book order: extras, then modules, then tasks."""
    return [
        *navigation.nodes("extra"),
        *navigation.nodes("module"),
        *navigation.nodes("task"),
    ]


def table_of_contents(navigation: NavigationModel) -> list[TocSection]:
    """Return the navigation document sections; unnamed extras show as ``Extras``."""
    sections: list[TocSection] = []
    for group in navigation.extras:
        name = group.name or DEFAULT_EXTRAS_GROUP
        sections.append(TocSection(name=name, groups=(dc.replace(group, name=""),)))
    if navigation.modules:
        sections.append(TocSection(name="Modules", groups=navigation.modules))
    if navigation.tasks:
        sections.append(TocSection(name="Tasks", groups=navigation.tasks))
    return sections


def manifest_items(written: cabc.Iterable[str]) -> list[ManifestItem]:
    """List staged content files with their media types, in sorted order."""
    items: list[ManifestItem] = []
    prefix = f"{CONTENT_DIR}/"
    for relative in sorted(written):
        if not relative.startswith(prefix):
            continue
        href = relative.removeprefix(prefix)
        if href in {"nav.xhtml", "content.opf"}:
            continue
        suffix = PurePosixPath(href).suffix.lower()
        media_type = EPUB_MEDIA_TYPES.get(suffix, "application/octet-stream")
        items.append(ManifestItem(id=_item_id(href), href=href, media_type=media_type))
    return items


def modified_timestamp(config: BuildConfig) -> dt.datetime:
    """Return the book's last-modified time, stable across identical builds.

    ``SOURCE_DATE_EPOCH`` wins when set. Otherwise the newest modification
    time of the extra files and the logo is used, falling back to the zip
    entry timestamp when the book has no file inputs.

    Raises
    ------
    ConfigError
        If ``SOURCE_DATE_EPOCH`` is not an integer.
    """
    epoch = os.environ.get(SOURCE_DATE_ENV)
    if epoch:
        try:
            return dt.datetime.fromtimestamp(int(epoch), dt.UTC)
        except ValueError as exc:
            msg = f"{SOURCE_DATE_ENV} must be an integer, got {epoch!r}"
            raise ConfigError(msg) from exc

    inputs = [entry.path for entry in config.extras if not entry.is_api_reference]
    if config.logo is not None:
        inputs.append(config.logo)
    mtimes = [path.stat().st_mtime for path in inputs if path.is_file()]
    if mtimes:
        return dt.datetime.fromtimestamp(int(max(mtimes)), dt.UTC)
    return dt.datetime(*ZIP_TIMESTAMP, tzinfo=dt.UTC)


def book_identifier(config: BuildConfig) -> str:
    """Return a stable UUID for the project and version."""
    name = f"{GENERATOR_NAME}:{config.project}:{config.version}"
    return str(uuid.uuid5(uuid.NAMESPACE_URL, name))


def package(staging_dir: Path, archive: Path) -> None:
    """Zip ``staging_dir`` into ``archive`` with ``mimetype`` stored first."""
    files = sorted(
        path.relative_to(staging_dir).as_posix()
        for path in staging_dir.rglob("*")
        if path.is_file()
    )
    ordered = ["mimetype", *(name for name in files if name != "mimetype")]
    with zipfile.ZipFile(archive, "w") as bundle:
        for name in ordered:
            info = zipfile.ZipInfo(name, date_time=ZIP_TIMESTAMP)
            info.external_attr = 0o644 << 16
            suffix = PurePosixPath(name).suffix.lower()
            if name != "mimetype" and suffix in EPUB_COMPRESSED_SUFFIXES:
                info.compress_type = zipfile.ZIP_DEFLATED
            else:
                info.compress_type = zipfile.ZIP_STORED
            bundle.writestr(info, (staging_dir / name).read_bytes())


def _item_id(href: str) -> str:
    """Return an XML-safe manifest id for ``href``."""
    stem = ITEM_ID_PATTERN.sub("-", PurePosixPath(href).with_suffix("").as_posix())
    return stem if stem[:1].isalpha() else f"_{stem}"


__all__ = [
    "book_identifier",
    "manifest_items",
    "modified_timestamp",
    "package",
    "reading_order",
    "run",
    "table_of_contents",
]
