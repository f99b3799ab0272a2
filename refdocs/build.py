"""Run every configured formatter over one set of documentation nodes."""

from __future__ import annotations

import typing as typ

from refdocs.formatters import FORMATTERS
from refdocs.generator import HtmlContentRenderer

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from refdocs.config import BuildConfig
    from refdocs.models import DocNode


def generate_docs(
    config: BuildConfig,
    nodes: cabc.Sequence[DocNode],
    *,
    formatters: cabc.Sequence[str] | None = None,
) -> dict[str, Path]:
    """Generate documentation in each requested format.

    Parameters
    ----------
    config : BuildConfig
        Build definition.
    nodes : Sequence[DocNode]
        Extracted modules and tasks.
    formatters : Sequence[str], optional
        Formats to produce; defaults to ``config.formatters``.

    Returns
    -------
    dict[str, Path]
        Artifact per format: the output directory for ``html``, the archive
        for ``epub``.

    Raises
    ------
    ConfigError
        If the configuration is invalid; raised before any file is written.

    Examples
    --------
    >>> from refdocs import build_config, generate_docs
    >>> config = build_config({"project": "Demo", "output": "doc"})
    >>> generate_docs(config, [])  # doctest: +SKIP
    {'html': PosixPath('doc')}
    """
    config.validate()
    renderer = HtmlContentRenderer()
    artifacts: dict[str, Path] = {}
    for position, name in enumerate(formatters or config.formatters):
        run = FORMATTERS[name]
        artifacts[name] = run(config, nodes, renderer=renderer, report=position == 0)
    return artifacts


__all__ = ["generate_docs"]
