"""Shared fixtures for refdocs tests."""

from __future__ import annotations

import collections.abc as cabc
import typing as typ

import pytest
from loguru import logger

from refdocs.config import BuildConfig, build_config
from refdocs.models import DocMember, DocNode, HeaderEntry

if typ.TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def log_messages() -> cabc.Iterator[list[str]]:
    """Collect the text of every warning logged while the test runs."""
    messages: list[str] = []
    handler_id = logger.add(
        lambda message: messages.append(message.record["message"]),
        level="WARNING",
        format="{message}",
    )
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def sample_nodes() -> list[DocNode]:
    """Return two modules and a task with one dangling reference."""
    return [
        DocNode(
            id="Warnings",
            title="Warnings",
            source_path="lib/warnings.ex",
            source_line=1,
            summary="<p>Emits warnings.</p>",
            content=(
                '<p>Raises <code class="inline">RandomError</code> and calls '
                '<code class="inline">Warnings.bar/0</code>.</p>'
                '<h2 id="usage">Usage</h2><p>Call it.</p>'
            ),
            headers=(HeaderEntry(anchor="usage", text="Usage"),),
            members=(
                DocMember(
                    "function",
                    "foo",
                    0,
                    content='<p>See <code class="inline">t:Warnings.t/0</code>.</p>',
                    signature="foo()",
                    source_line=5,
                ),
                DocMember("type", "t", 0, signature="t()"),
                DocMember("callback", "handle_foo", 0, signature="handle_foo()"),
            ),
        ),
        DocNode(
            id="RandomError",
            title="RandomError",
            source_path="lib/random_error.ex",
            source_line=1,
            summary="<p>An error.</p>",
            content="<p>Raised at random.</p>",
        ),
        DocNode(
            id="Mix.Tasks.Demo",
            title="mix demo",
            kind="task",
            summary="<p>Runs the demo.</p>",
        ),
    ]


@pytest.fixture
def make_config(tmp_path: Path) -> cabc.Callable[..., BuildConfig]:
    """Return a factory building configs rooted in ``tmp_path``."""

    def _make(**raw: object) -> BuildConfig:
        data: dict[str, object] = {
            "project": "Elixir",
            "version": "1.0.1",
            "output": str(tmp_path / "doc"),
        }
        data.update(raw)
        return build_config(data, base_dir=tmp_path)

    return _make


@pytest.fixture
def extra_files(tmp_path: Path) -> dict[str, Path]:
    """Write a LICENSE and a README linking to it."""
    license_path = tmp_path / "LICENSE"
    license_path.write_text("Copyright <2024> Someone\n", encoding="utf-8")
    readme_path = tmp_path / "README.md"
    readme_path.write_text(
        "# Read me\n\n"
        "See [the license](LICENSE) before using `Warnings.foo/0`.\n\n"
        "## Install\n\n"
        "Run the installer.\n",
        encoding="utf-8",
    )
    return {"LICENSE": license_path, "README.md": readme_path}
