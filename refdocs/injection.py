"""Custom markup spliced before closing ``</head>``, ``</body>`` and footer tags.

Users may supply injected markup in four shapes. :func:`coerce_injection`
turns whatever the configuration holds into one of the variants below, and
each page render calls :meth:`resolve` once with the output format
(``"html"`` or ``"epub"``).

Example
-------
>>> from refdocs.injection import coerce_injection
>>> coerce_injection({"html": "<meta name=demo>"}).resolve("html")
'<meta name=demo>'
>>> coerce_injection({"html": "<meta name=demo>"}).resolve("epub")
''
>>> coerce_injection((lambda fmt, name: f"<p>{fmt}:{name}</p>", "x")).resolve("html")
'<p>html:x</p>'
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import importlib
import typing as typ

from refdocs.errors import ConfigError


@dc.dataclass(slots=True, frozen=True)
class Static:
    """The same markup for every format."""

    text: str = ""

    def resolve(self, fmt: str) -> str:  # noqa: ARG002
        return self.text


@dc.dataclass(slots=True, frozen=True)
class ByFormat:
    """Markup keyed by format; formats without an entry get nothing."""

    mapping: cabc.Mapping[str, str]

    def resolve(self, fmt: str) -> str:
        return self.mapping.get(fmt, "")


@dc.dataclass(slots=True, frozen=True)
class Callback:
    """A function called with the format tag."""

    func: cabc.Callable[[str], str]

    def resolve(self, fmt: str) -> str:
        return self.func(fmt)


@dc.dataclass(slots=True, frozen=True)
class CallbackWithArg:
    """A function called with the format tag and a caller-supplied value."""

    func: cabc.Callable[[str, typ.Any], str]
    arg: typ.Any

    def resolve(self, fmt: str) -> str:
        return self.func(fmt, self.arg)


Injection = Static | ByFormat | Callback | CallbackWithArg


def coerce_injection(value: object) -> Injection:
    """Return the injection variant matching the shape of ``value``.

    Parameters
    ----------
    value : object
        ``None`` or a string (static markup), a mapping of format to markup,
        a callable taking the format, a ``(callable, arg)`` pair, an existing
        variant, or a mapping ``{"callback": "pkg.mod:func", "arg": ...}``
        as written in YAML configuration.

    Returns
    -------
    Injection
        The resolved variant.

    Raises
    ------
    ConfigError
        If ``value`` has none of the supported shapes.
    """
    match value:
        case None:
            return Static()
        case Static() | ByFormat() | Callback() | CallbackWithArg():
            return value
        case str():
            return Static(value)
        case {"callback": str() as target, **rest}:
            func = _import_callable(target)
            if "arg" in rest:
                return CallbackWithArg(func, rest["arg"])
            return Callback(func)
        case cabc.Mapping():
            return ByFormat({str(k): str(v) for k, v in value.items()})
        case (func, arg) if callable(func):
            return CallbackWithArg(func, arg)
        case _ if callable(value):
            return Callback(typ.cast("cabc.Callable[[str], str]", value))
        case _:
            msg = f"Unsupported injection value: {value!r}"
            raise ConfigError(msg)


def _import_callable(target: str) -> cabc.Callable[..., str]:
    """Import ``package.module:function`` and return the function."""
    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        msg = f"Injection callback '{target}' must look like 'package.module:function'."
        raise ConfigError(msg)
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        msg = f"Cannot import injection callback module '{module_name}'."
        raise ConfigError(msg) from exc
    func = getattr(module, attr, None)
    if not callable(func):
        msg = f"Injection callback '{target}' is not callable."
        raise ConfigError(msg)
    return func


__all__ = [
    "ByFormat",
    "Callback",
    "CallbackWithArg",
    "Injection",
    "Static",
    "coerce_injection",
]
