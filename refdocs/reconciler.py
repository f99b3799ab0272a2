"""Own an output directory across repeated documentation builds.

The reconciler makes reruns idempotent without touching files it did not
create. Each run records every path it writes; :meth:`OutputReconciler.finalize`
compares that set with the manifest persisted by the previous run and deletes
only the difference. Files never listed in a manifest are left alone.

Examples
--------
>>> from pathlib import Path
>>> from refdocs.reconciler import OutputReconciler
>>> reconciler = OutputReconciler(Path("doc"))  # doctest: +SKIP
>>> reconciler.setup()  # doctest: +SKIP
>>> reconciler.write_text("index.html", "<html></html>")  # doctest: +SKIP
>>> reconciler.finalize()  # doctest: +SKIP
[]
"""

from __future__ import annotations

import shutil
import threading
from pathlib import Path, PurePosixPath

from loguru import logger

from refdocs._constants import GENERATOR_NAME, SENTINEL_NAME

FOREIGN_DIRECTORY_WARNING = (
    f"{GENERATOR_NAME} is outputting to an existing directory. "
    "Beware documentation output may mix with existing files"
)


class OutputReconciler:
    """Write generated files into ``target_dir`` and prune stale ones."""

    def __init__(self, target_dir: Path, *, manifest_name: str = ".build") -> None:
        """Initialize the reconciler.

        Parameters
        ----------
        target_dir : Path
            Directory the build writes into.
        manifest_name : str, optional
            File inside ``target_dir`` that persists the list of generated
            paths. Each format uses its own name.
        """
        self.target_dir = target_dir
        self.manifest_name = manifest_name
        self._written: set[str] = set()
        self._lock = threading.Lock()
        self._warned = False

    @property
    def manifest_path(self) -> Path:
        return self.target_dir / self.manifest_name

    @property
    def written(self) -> frozenset[str]:
        """Return the relative paths recorded so far in this run."""
        with self._lock:
            return frozenset(self._written)

    def setup(self) -> None:
        """Prepare ``target_dir`` for writing.

        A missing directory is created. An empty directory, or one already
        marked by the sentinel file, is used silently. Any other non-empty
        directory is used after a single warning.
        """
        sentinel = self.target_dir / SENTINEL_NAME
        if not self.target_dir.exists():
            self.target_dir.mkdir(parents=True)
            sentinel.touch()
            return

        has_content = any(
            entry.name != SENTINEL_NAME for entry in self.target_dir.iterdir()
        )
        if has_content and not sentinel.exists() and not self._warned:
            logger.warning(FOREIGN_DIRECTORY_WARNING)
            self._warned = True
        sentinel.touch()

    def write_text(self, relative: str, text: str) -> Path:
        """Write ``text`` as UTF-8 to ``relative`` and record it."""
        path = self._claim(relative)
        path.write_text(text, encoding="utf-8")
        return path

    def write_bytes(self, relative: str, data: bytes) -> Path:
        """Write ``data`` to ``relative`` and record it."""
        path = self._claim(relative)
        path.write_bytes(data)
        return path

    def copy_file(self, source: Path, relative: str) -> Path:
        """Copy ``source`` to ``relative`` and record it."""
        path = self._claim(relative)
        shutil.copyfile(source, path)
        return path

    def copy_tree(self, source: Path, relative: str) -> list[Path]:
        """Copy every file below ``source`` into ``relative``, recording each."""
        copied: list[Path] = []
        for file in sorted(source.rglob("*")):
            if file.is_file():
                target = PurePosixPath(relative, file.relative_to(source).as_posix())
                copied.append(self.copy_file(file, str(target)))
        return copied

    def record(self, relative: str) -> None:
        """Record ``relative`` as generated without writing it."""
        self._claim(relative)

    def finalize(self) -> list[str]:
        """Delete stale files from the previous run and persist the manifest.

        Returns
        -------
        list[str]
            Relative paths removed, in sorted order.
        """
        current = self.written
        removed: list[str] = []
        for relative in sorted(self.read_manifest() - current):
            path = self._inside(relative)
            if path is None or not path.is_file():
                continue
            path.unlink()
            removed.append(relative)
            self._prune_empty_parents(path.parent)

        lines = "".join(f"{relative}\n" for relative in sorted(current))
        self.manifest_path.write_text(lines, encoding="utf-8")
        return removed

    def read_manifest(self) -> set[str]:
        """Return the paths listed by the previous run's manifest."""
        if not self.manifest_path.is_file():
            return set()
        text = self.manifest_path.read_text(encoding="utf-8")
        return {line.strip() for line in text.splitlines() if line.strip()}

    def _claim(self, relative: str) -> Path:
        key = PurePosixPath(relative).as_posix()
        path = self._inside(key)
        if path is None:
            msg = f"Refusing to write outside {self.target_dir}: {relative}"
            raise ValueError(msg)
        with self._lock:
            if key in self._written:
                logger.warning(f"file {key} already exists")
            self._written.add(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    def _inside(self, relative: str) -> Path | None:
        """Return the absolute path for ``relative`` if it stays in the target."""
        root = self.target_dir.resolve()
        path = (root / relative).resolve()
        if path == root or not path.is_relative_to(root):
            return None
        return path

    def _prune_empty_parents(self, directory: Path) -> None:
        root = self.target_dir.resolve()
        while directory != root and directory.is_relative_to(root):
            if any(directory.iterdir()):
                return
            directory.rmdir()
            directory = directory.parent


__all__ = ["FOREIGN_DIRECTORY_WARNING", "OutputReconciler"]
