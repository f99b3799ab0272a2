"""Load and validate refdocs build configuration.

This subpackage parses a ``refdocs.yaml`` file (or a plain mapping handed in
from Python), resolves relative paths, compiles group and filter patterns,
coerces injection points, and produces a :class:`BuildConfig` that the
formatters consume. :meth:`BuildConfig.validate` raises :class:`ConfigError`
for the settings that must abort a build before anything is written.

Examples
--------
>>> from refdocs.config import build_config
>>> config = build_config({"project": "Elixir", "version": "1.0.1"})
>>> config.title
'Elixir v1.0.1'
>>> config.main_page
'api-reference'
"""

from refdocs.errors import ConfigError

from .loader import build_config, load_build_config
from .models import BuildConfig, ExtraConfig, GroupRule

__all__ = [
    "BuildConfig",
    "ConfigError",
    "ExtraConfig",
    "GroupRule",
    "build_config",
    "load_build_config",
]
