# reqdeco/core/params.py
"""
Placeholder binding and resolution.

Bindings are declared either with ``Annotated[..., Param(key)]`` on an
argument or with ``@bind(key, index_or_name)`` on the method. At call time
each placeholder in a request template is replaced with the (optionally
converted) value of the bound argument. Placeholders without a binding
resolve to ``None``.
"""
from __future__ import annotations

import builtins
import inspect
import logging
import typing
from typing import Any, Callable, Mapping

from reqdeco.contracts.request import Param, ParamSpec, Placeholder
from reqdeco.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

_IMPLICIT_FIRST = ("self", "cls")
_NAMED_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.KEYWORD_ONLY,
)


def argument_names(fn: Callable[..., Any]) -> list[str]:
    """Declared argument names of ``fn``, without a leading ``self``/``cls``."""
    params = list(inspect.signature(inspect.unwrap(fn)).parameters.values())
    if params and params[0].name in _IMPLICIT_FIRST:
        params = params[1:]
    return [p.name for p in params if p.kind in _NAMED_KINDS]


def spec_for(
    fn: Callable[..., Any],
    index_or_name: int | str,
    convert: Callable[[Any], Any] | None = None,
) -> ParamSpec:
    names = argument_names(fn)
    if isinstance(index_or_name, int):
        if not 0 <= index_or_name < len(names):
            raise ConfigurationError(
                f"'{fn.__qualname__}' has no argument at index {index_or_name}. "
                f"Arguments: {names}"
            )
        return ParamSpec(index=index_or_name, name=names[index_or_name], convert=convert)

    if index_or_name not in names:
        raise ConfigurationError(
            f"'{fn.__qualname__}' has no argument '{index_or_name}'. Arguments: {names}"
        )
    return ParamSpec(index=names.index(index_or_name), name=index_or_name, convert=convert)


class _LenientNamespace(dict):
    """Name lookup for string annotations: globals, builtins, then ``Any``.

    Names local to an enclosing function are not reachable from a postponed
    annotation; they stand in as ``Any`` so the ``Param`` marker survives.
    """

    def __init__(self, globalns: Mapping[str, Any]) -> None:
        super().__init__()
        self.globalns = globalns
        self.unresolved: list[str] = []

    def __missing__(self, key: str) -> Any:
        if key in self.globalns:
            return self.globalns[key]
        if hasattr(builtins, key):
            return getattr(builtins, key)
        self.unresolved.append(key)
        return Any


def _evaluate(annotation: Any, fn: Callable[..., Any]) -> Any:
    if not isinstance(annotation, str):
        return annotation

    namespace = _LenientNamespace(getattr(fn, "__globals__", {}))
    try:
        hint = eval(annotation, namespace.globalns, namespace)  # noqa: S307
    except Exception as exc:
        raise ConfigurationError(
            f"Can not resolve annotation {annotation!r} on '{fn.__qualname__}': {exc}"
        ) from exc

    if namespace.unresolved:
        logger.warning(
            "Annotation %r on %s refers to unknown names %s, treated as Any",
            annotation,
            fn.__qualname__,
            namespace.unresolved,
        )
    return hint


def _argument_hints(target: Callable[..., Any]) -> dict[str, Any]:
    try:
        return typing.get_type_hints(target, include_extras=True)
    except Exception:
        # some annotation refers to a name outside the module namespace
        annotations = inspect.get_annotations(target)
        return {name: _evaluate(value, target) for name, value in annotations.items()}


def annotated_specs(fn: Callable[..., Any]) -> dict[str, ParamSpec]:
    """Collect ``Param`` markers from ``Annotated`` argument annotations.

    Raises ``ConfigurationError`` when an annotation can not be evaluated at
    all, so a binding is never dropped silently.
    """
    target = inspect.unwrap(fn)
    names = argument_names(target)
    hints = _argument_hints(target)

    specs: dict[str, ParamSpec] = {}
    for index, name in enumerate(names):
        if name not in hints:
            continue
        hint = hints[name]
        if typing.get_origin(hint) is not typing.Annotated:
            continue
        for extra in hint.__metadata__:
            if isinstance(extra, Param):
                specs[extra.key] = ParamSpec(index=index, name=name, convert=extra.convert)
    return specs


def bind_arguments(
    fn: Callable[..., Any], args: tuple[Any, ...], kwargs: Mapping[str, Any]
) -> dict[str, Any]:
    """Map a call's arguments to argument names, defaults applied."""
    bound = inspect.signature(inspect.unwrap(fn)).bind(*args, **kwargs)
    bound.apply_defaults()
    return dict(bound.arguments)


def resolve_value(value: Any, specs: Mapping[str, ParamSpec], arguments: Mapping[str, Any]) -> Any:
    if not isinstance(value, Placeholder):
        return value
    spec = specs.get(value.key)
    if spec is None:
        logger.debug("No binding for placeholder '%s'", value.key)
        return None
    raw = arguments.get(spec.name)
    return spec.convert(raw) if spec.convert else raw


def resolve_template(
    template: Mapping[str, Any] | None,
    specs: Mapping[str, ParamSpec],
    arguments: Mapping[str, Any],
) -> dict[str, Any] | None:
    """Produce concrete values for a params/headers template.

    Literals pass through verbatim, placeholders are looked up through
    ``specs``. A ``None`` template resolves to ``None``.
    """
    if template is None:
        return None
    return {k: resolve_value(v, specs, arguments) for k, v in template.items()}
