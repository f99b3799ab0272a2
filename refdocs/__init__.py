"""Generate cross-linked HTML and EPUB documentation from extracted nodes.

This package turns already-extracted documentation nodes (modules, tasks,
free-form pages) into a reconciled set of output artifacts. It exposes the
``refdocs`` CLI and the Python entry point used by build scripts.

Exports
-------
- ``app``: Cyclopts application holding the ``generate`` subcommand.
- ``main``: Convenience function that invokes the Cyclopts app.
- ``generate_docs``: Run the configured formatters from Python.
- ``build_config`` / ``load_build_config``: Create a ``BuildConfig``.

Examples
--------
>>> from refdocs import build_config
>>> build_config({"project": "Elixir", "version": "1.0.1"}).title
'Elixir v1.0.1'
"""

from __future__ import annotations

from .build import generate_docs
from .cli import app, main
from .config import BuildConfig, ConfigError, build_config, load_build_config
from .models import DocMember, DocNode, HeaderEntry

__all__ = [
    "BuildConfig",
    "ConfigError",
    "DocMember",
    "DocNode",
    "HeaderEntry",
    "app",
    "build_config",
    "generate_docs",
    "load_build_config",
    "main",
]
