"""Tests for reading extra pages and rendering their markdown."""

from __future__ import annotations

import collections.abc as cabc
import typing as typ

import pytest
from bs4 import BeautifulSoup

from refdocs.config import BuildConfig, ConfigError
from refdocs.extras import api_reference_node, build_extras
from refdocs.generator import HtmlContentRenderer
from refdocs.models import DocNode, HeaderEntry

if typ.TYPE_CHECKING:
    from pathlib import Path

MakeConfig = cabc.Callable[..., BuildConfig]


def test_markdown_extra_takes_title_and_headers(
    make_config: MakeConfig, extra_files: dict[str, Path]
) -> None:
    config = make_config(extras=["README.md"], api_reference=False)
    (readme,) = build_extras(config)

    assert (readme.id, readme.title, readme.kind) == ("readme", "Read me", "extra")
    assert readme.headers == (HeaderEntry(anchor="install", text="Install"),)
    soup = BeautifulSoup(readme.content, "html.parser")
    assert soup.find("h1") is None, "the leading title is rendered by templates"
    assert soup.find("h2", id="install") is not None
    assert soup.find("a", href="LICENSE") is not None
    assert readme.source_path == "README.md"


def test_plain_text_extra_is_preformatted(
    make_config: MakeConfig, extra_files: dict[str, Path]
) -> None:
    config = make_config(extras=["LICENSE"], api_reference=False)
    (license_node,) = build_extras(config)

    assert (license_node.id, license_node.title) == ("license", "LICENSE")
    assert license_node.content == "<pre>Copyright &lt;2024&gt; Someone\n</pre>"


def test_overrides_replace_title_id_and_group(
    make_config: MakeConfig, extra_files: dict[str, Path]
) -> None:
    config = make_config(
        extras=[
            {"README.md": {"title": "Start Here", "filename": "Getting Started"}},
            {"path": "LICENSE", "group": "Legal"},
        ],
        api_reference=False,
    )
    readme, license_node = build_extras(config)

    assert (readme.id, readme.title) == ("getting-started", "Start Here")
    assert license_node.group == "Legal"


def test_repeated_slugs_are_disambiguated(tmp_path: Path, make_config: MakeConfig) -> None:
    for folder in ("a", "b"):
        (tmp_path / folder).mkdir()
        (tmp_path / folder / "README.md").write_text("Text\n", encoding="utf-8")
    config = make_config(extras=["a/README.md", "b/README.md"], api_reference=False)

    assert [node.id for node in build_extras(config)] == ["readme", "readme-2"]


def test_reserved_page_ids_are_never_reused(
    tmp_path: Path, make_config: MakeConfig
) -> None:
    (tmp_path / "index.md").write_text("# Home\n", encoding="utf-8")
    (tmp_path / "API Reference.md").write_text("# Mine\n", encoding="utf-8")
    config = make_config(extras=["index.md", "API Reference.md"])

    ids = [node.id for node in build_extras(config)]
    assert ids == ["api-reference", "index-2", "api-reference-2"]


def test_backend_reserved_ids_are_skipped(tmp_path: Path, make_config: MakeConfig) -> None:
    (tmp_path / "nav.md").write_text("# Navigating\n", encoding="utf-8")
    config = make_config(extras=["nav.md"], api_reference=False)

    assert [node.id for node in build_extras(config)] == ["nav"]
    assert [node.id for node in build_extras(config, reserved=["nav"])] == ["nav-2"]


@pytest.mark.parametrize("name", ["Notebook.livemd", "cheats.cheatmd"])
def test_livebook_and_cheatsheet_extras_render_markdown(
    tmp_path: Path, make_config: MakeConfig, name: str
) -> None:
    (tmp_path / name).write_text("# Cells\n\n## Setup\n\n*run* it\n", encoding="utf-8")
    config = make_config(extras=[name], api_reference=False)
    (node,) = build_extras(config)

    assert node.title == "Cells"
    assert node.headers == (HeaderEntry(anchor="setup", text="Setup"),)
    soup = BeautifulSoup(node.content, "html.parser")
    assert soup.find("pre") is None
    emphasis = soup.find("em")
    assert emphasis is not None and emphasis.get_text() == "run"


def test_api_reference_is_first_by_default(
    make_config: MakeConfig, extra_files: dict[str, Path]
) -> None:
    config = make_config(extras=["README.md", "LICENSE"])
    assert [node.id for node in build_extras(config)] == [
        "api-reference",
        "readme",
        "license",
    ]


def test_api_reference_marker_positions_the_page(
    make_config: MakeConfig, extra_files: dict[str, Path]
) -> None:
    config = make_config(extras=["README.md", "api-reference", "LICENSE"])
    assert [node.id for node in build_extras(config)] == [
        "readme",
        "api-reference",
        "license",
    ]


def test_api_reference_can_be_disabled(
    make_config: MakeConfig, extra_files: dict[str, Path]
) -> None:
    config = make_config(extras=["README.md", "api-reference"], api_reference=False)
    assert [node.id for node in build_extras(config)] == ["readme"]


def test_api_reference_outline_follows_node_kinds(sample_nodes: list[DocNode]) -> None:
    assert [header.anchor for header in api_reference_node(sample_nodes).headers] == [
        "modules",
        "tasks",
    ]
    modules_only = [node for node in sample_nodes if node.kind == "module"]
    assert [header.text for header in api_reference_node(modules_only).headers] == [
        "Modules"
    ]
    assert api_reference_node().headers == ()


def test_missing_extra_raises(make_config: MakeConfig) -> None:
    config = make_config(extras=["MISSING.md"])
    with pytest.raises(ConfigError, match="not found"):
        build_extras(config)


def test_symbol_only_filename_raises(tmp_path: Path, make_config: MakeConfig) -> None:
    (tmp_path / "→.md").write_text("Arrow\n", encoding="utf-8")
    config = make_config(extras=["→.md"])
    with pytest.raises(ConfigError, match="usable filename"):
        build_extras(config)


def test_renderer_anchors_repeated_and_symbolic_headings() -> None:
    rendered = HtmlContentRenderer().markdown(
        "# Guide\n\n## Setup\n\ntext\n\n## Setup\n\n### Details\n\n## &sup2;\n"
    )

    assert rendered.title == "Guide"
    assert [header.anchor for header in rendered.headers] == ["setup", "setup-2"]
    soup = BeautifulSoup(rendered.html, "html.parser")
    assert soup.find("h3", id="details") is not None
    symbolic = soup.find_all("h2")[-1]
    assert not symbolic.has_attr("id"), "symbol-only headings get no anchor"


def test_renderer_highlights_fenced_code() -> None:
    rendered = HtmlContentRenderer().markdown("```elixir\nIO.puts(1)\n```\n")
    soup = BeautifulSoup(rendered.html, "html.parser")
    block = soup.find("div", class_="codehilite")
    assert block is not None
    assert block["data-language"] == "elixir"
    assert rendered.title is None
