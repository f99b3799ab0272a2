"""Behaviour tests for reconciling generated files across rebuilds.

These pytest-bdd scenarios drive the HTML and EPUB backends against one
output directory and check what survives a rebuild: stale generated pages
are pruned, files the user placed there are not, a foreign directory is
flagged once, and each format keeps to its own manifest.

Usage
-----
Run ``pytest tests/bdd/test_output_reconciliation.py -v`` after installing
the test extra. Scenarios are defined in
``features/output_reconciliation.feature``.
"""

from __future__ import annotations

import collections.abc as cabc
import typing as typ
from pathlib import Path

import pytest
from pytest_bdd import given, scenarios, then, when

from refdocs.config import BuildConfig
from refdocs.formatters import epub, html
from refdocs.reconciler import FOREIGN_DIRECTORY_WARNING

if typ.TYPE_CHECKING:
    from refdocs.models import DocNode

FEATURE_FILE = (
    Path(__file__).resolve().parents[2] / "features" / "output_reconciliation.feature"
)
scenarios(FEATURE_FILE)

USER_FILE = "notes.txt"


@pytest.fixture
def scenario_state() -> dict[str, object]:
    """Return a mutable dict used to share scenario state across BDD steps."""
    return {}


def _config(scenario_state: dict[str, object], *extras: str) -> BuildConfig:
    make_config = typ.cast(
        "cabc.Callable[..., BuildConfig]", scenario_state["make_config"]
    )
    return make_config(extras=list(extras))


def _output(scenario_state: dict[str, object]) -> Path:
    return _config(scenario_state).output


def _nodes(scenario_state: dict[str, object]) -> list[DocNode]:
    return typ.cast("list[DocNode]", scenario_state["nodes"])


@given("a project with a README and a LICENSE extra")
def given_project(
    scenario_state: dict[str, object],
    make_config: cabc.Callable[..., BuildConfig],
    extra_files: dict[str, Path],
    sample_nodes: list[DocNode],
    log_messages: list[str],
) -> None:
    """Store the config factory, nodes and the warning collector."""
    scenario_state["make_config"] = make_config
    scenario_state["nodes"] = sample_nodes
    scenario_state["log_messages"] = log_messages
    assert extra_files["README.md"].exists()


@given("the HTML site has already been generated")
def given_generated(scenario_state: dict[str, object]) -> None:
    """Run the HTML backend once with both extras."""
    html.run(_config(scenario_state, "README.md", "LICENSE"), _nodes(scenario_state))


@given("a user file sits in the output directory")
def given_user_file(scenario_state: dict[str, object]) -> None:
    """Drop a file refdocs did not write into the output directory."""
    (_output(scenario_state) / USER_FILE).write_text("mine", encoding="utf-8")


@given("the output directory already holds unrelated files")
def given_foreign_directory(scenario_state: dict[str, object]) -> None:
    """Create the output directory with content from elsewhere."""
    output = _output(scenario_state)
    output.mkdir(parents=True)
    (output / USER_FILE).write_text("mine", encoding="utf-8")


@when("the site is regenerated without the LICENSE extra")
def when_regenerated(scenario_state: dict[str, object]) -> None:
    """Rebuild with the README only."""
    html.run(_config(scenario_state, "README.md"), _nodes(scenario_state))


@when("the site is generated twice")
def when_generated_twice(scenario_state: dict[str, object]) -> None:
    """Build the site two times in a row."""
    config = _config(scenario_state, "README.md", "LICENSE")
    html.run(config, _nodes(scenario_state))
    html.run(config, _nodes(scenario_state))


@when("the site and the book are generated")
def when_both_formats(scenario_state: dict[str, object]) -> None:
    """Build the HTML site, then the EPUB book, into one directory."""
    config = _config(scenario_state, "README.md", "LICENSE")
    html.run(config, _nodes(scenario_state))
    scenario_state["archive"] = epub.run(config, _nodes(scenario_state))


@when("the site is generated again")
def when_site_again(scenario_state: dict[str, object]) -> None:
    """Rebuild only the HTML site."""
    html.run(_config(scenario_state, "README.md", "LICENSE"), _nodes(scenario_state))


@then("the LICENSE page is removed")
def then_license_removed(scenario_state: dict[str, object]) -> None:
    """Verify the page of the dropped extra is gone."""
    output = _output(scenario_state)
    assert not (output / "license.html").exists()
    assert (output / "readme.html").exists()


@then("the user file is untouched")
@then("the unrelated files are untouched")
def then_user_file_untouched(scenario_state: dict[str, object]) -> None:
    """Verify the file refdocs did not write still holds its content."""
    path = _output(scenario_state) / USER_FILE
    assert path.read_text(encoding="utf-8") == "mine"


@then("the manifest no longer lists the LICENSE page")
def then_manifest_updated(scenario_state: dict[str, object]) -> None:
    """Verify the persisted manifest reflects the latest run."""
    manifest = (_output(scenario_state) / ".build").read_text(encoding="utf-8")
    assert "license.html" not in manifest.splitlines()
    assert "readme.html" in manifest.splitlines()


@then("exactly one foreign directory warning is written")
def then_one_warning(scenario_state: dict[str, object]) -> None:
    """Verify the foreign directory warning appears a single time."""
    messages = typ.cast("list[str]", scenario_state["log_messages"])
    assert messages.count(FOREIGN_DIRECTORY_WARNING) == 1


@then("the book archive still exists")
def then_archive_exists(scenario_state: dict[str, object]) -> None:
    """Verify an HTML rebuild leaves the EPUB archive in place."""
    archive = typ.cast("Path", scenario_state["archive"])
    assert archive.is_file()


@then("each format keeps its own manifest")
def then_separate_manifests(scenario_state: dict[str, object]) -> None:
    """Verify the HTML and EPUB manifests list only their own output."""
    output = _output(scenario_state)
    html_manifest = (output / ".build").read_text(encoding="utf-8").splitlines()
    epub_manifest = (output / ".build-epub").read_text(encoding="utf-8").splitlines()
    assert epub_manifest == ["Elixir.epub"]
    assert "Elixir.epub" not in html_manifest
    assert "index.html" in html_manifest
