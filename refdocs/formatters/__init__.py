"""Output format backends keyed by formatter name."""

from __future__ import annotations

import typing as typ

from . import epub, html
from .common import PreparedCorpus, prepare_corpus, run_parallel

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from refdocs.config import BuildConfig
    from refdocs.generator import HtmlContentRenderer
    from refdocs.models import DocNode


class Formatter(typ.Protocol):
    """Callable producing one format's artifact from config and nodes."""

    def __call__(
        self,
        config: BuildConfig,
        nodes: cabc.Sequence[DocNode],
        *,
        renderer: HtmlContentRenderer | None = None,
        report: bool = True,
    ) -> Path: ...


FORMATTERS: dict[str, Formatter] = {"html": html.run, "epub": epub.run}

__all__ = [
    "FORMATTERS",
    "Formatter",
    "PreparedCorpus",
    "prepare_corpus",
    "run_parallel",
]
