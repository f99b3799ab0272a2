"""Pipeline stages shared by every output format."""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import os
import typing as typ
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait

from loguru import logger

from refdocs.assembler import assemble
from refdocs.extras import build_extras
from refdocs.references import ReferenceIndex, ReferenceResolver, report_warnings

if typ.TYPE_CHECKING:
    from refdocs.config import BuildConfig
    from refdocs.generator import HtmlContentRenderer
    from refdocs.models import DocNode, NavigationModel, ReferenceWarning

T = typ.TypeVar("T")
R = typ.TypeVar("R")


@dc.dataclass(slots=True, frozen=True)
class PreparedCorpus:
    """Resolved nodes and their navigation model, ready for rendering.

    Attributes
    ----------
    nodes : list[DocNode]
        Modules, tasks and extras in navigation order, with references
        rewritten for the target format.
    navigation : NavigationModel
        Groups and pagination shared by every page.
    warnings : list[ReferenceWarning]
        References that could not be resolved.
    """

    nodes: list[DocNode]
    navigation: NavigationModel
    warnings: list[ReferenceWarning]


def prepare_corpus(
    config: BuildConfig,
    nodes: cabc.Sequence[DocNode],
    *,
    extension: str,
    renderer: HtmlContentRenderer | None = None,
    report: bool = True,
    reserved: cabc.Iterable[str] = (),
) -> PreparedCorpus:
    """Filter, resolve and assemble ``nodes`` before anything is written.

    Raises
    ------
    ConfigError
        If the configuration or an extra is invalid.
    """
    documented = [node for node in nodes if not config.is_filtered(node.id)]
    filtered = [node.id for node in nodes if config.is_filtered(node.id)]
    if filtered:
        logger.debug(f"filtered {len(filtered)} module(s) out of the documentation")

    extras = build_extras(config, documented, renderer=renderer, reserved=reserved)
    corpus = [*documented, *extras]
    resolver = ReferenceResolver(
        ReferenceIndex.build(corpus, filtered=filtered),
        extension=extension,
        skip_warnings_on=config.skip_undefined_reference_warnings_on,
    )
    resolved, warnings = resolver.resolve_all(corpus)
    if report:
        report_warnings(warnings)

    navigation = assemble(resolved, config)
    return PreparedCorpus(
        nodes=navigation.nodes(),
        navigation=navigation,
        warnings=warnings,
    )


def run_parallel(
    func: cabc.Callable[[T], R], items: cabc.Sequence[T]
) -> list[R]:
    """Apply ``func`` to every item on a bounded thread pool.

    Results come back in input order. The first failure cancels work that
    has not started and is re-raised once running tasks finish.
    """
    if not items:
        return []
    workers = min(len(items), (os.cpu_count() or 1) + 4)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(func, item) for item in items]
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        for future in pending:
            future.cancel()
        for future in futures:
            if future in done and future.exception() is not None:
                raise typ.cast("BaseException", future.exception())
    return [future.result() for future in futures]


__all__ = ["PreparedCorpus", "prepare_corpus", "run_parallel"]
