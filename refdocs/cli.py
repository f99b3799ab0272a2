"""Cyclopts CLI entrypoint for generating refdocs documentation.

The ``refdocs`` console script reads a build configuration (``refdocs.yaml``)
and a file of extracted documentation nodes, then writes every configured
format into the output directory. Diagnostics (undefined references, a
foreign output directory, a broken index redirect) go to stderr as
``warning: ...`` lines and never fail the build.

Examples
--------
Generate the configured formats:

>>> from refdocs.cli import main
>>> main()  # doctest: +SKIP

Produce only the EPUB into a custom directory:

>>> from refdocs.cli import app
>>> app(
...     ["generate", "--formatter", "epub", "--output", "dist"]
... )  # doctest: +SKIP
"""

from __future__ import annotations

import sys
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter
from loguru import logger

from .build import generate_docs
from .config import load_build_config
from .nodes import load_nodes

if typ.TYPE_CHECKING:
    import loguru

DEFAULT_CONFIG = Path("refdocs.yaml")
DEFAULT_NODES = Path("nodes.yaml")

app = App(name="refdocs", config=cyclopts.config.Env("REFDOCS_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _format_record(record: loguru.Record) -> str:
    """Render records as ``<level>: <message>`` lines."""
    return f"{record['level'].name.lower()}: {{message}}\n{{exception}}"


def configure_logging(*, verbose: bool = False) -> None:
    """Send diagnostics to stderr, replacing loguru's default sink."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO", format=_format_record)


@app.command(help="Generate documentation from extracted nodes.")
def generate(
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to build config", env_var="REFDOCS_CONFIG")
    ] = DEFAULT_CONFIG,
    nodes: typ.Annotated[
        Path, Parameter(help="Path to extracted nodes", env_var="REFDOCS_NODES")
    ] = DEFAULT_NODES,
    formatter: typ.Annotated[
        list[str] | None,
        Parameter(help="Formats to generate (repeatable)", env_var="REFDOCS_FORMATTER"),
    ] = None,
    output: typ.Annotated[
        Path | None,
        Parameter(help="Override the output folder", env_var="REFDOCS_OUTPUT"),
    ] = None,
    verbose: typ.Annotated[
        bool, Parameter(help="Show debug diagnostics", env_var="REFDOCS_VERBOSE")
    ] = False,
) -> None:
    """Generate documentation for the configured project.

    Parameters
    ----------
    config : Path, optional
        Path to the ``refdocs.yaml`` configuration file (overridable via
        ``REFDOCS_CONFIG``).
    nodes : Path, optional
        YAML or JSON file holding the extracted documentation nodes.
    formatter : list[str] or None, optional
        Formats to produce; defaults to the configuration's ``formatters``.
    output : Path or None, optional
        Output directory replacing the configured one. Relative paths are
        taken from the working directory.
    verbose : bool, optional
        Include debug diagnostics on stderr.

    Returns
    -------
    None
        Writes the artifacts and prints one ``wrote <path>`` line per format.

    Raises
    ------
    ConfigError
        If the configuration is invalid; nothing is written in that case.
    """
    configure_logging(verbose=verbose)
    overrides: dict[str, typ.Any] = {
        "output": str(output.resolve()) if output is not None else None,
        "formatters": formatter or None,
    }
    build = load_build_config(config, overrides=overrides)
    artifacts = generate_docs(build, load_nodes(nodes))
    for path in artifacts.values():
        print(f"wrote {_format_path(path)}")


def main() -> None:
    """Invoke the Cyclopts application that powers the `refdocs` console command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
