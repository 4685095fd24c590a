# reqdeco/core/pipeline.py
"""
Response validation/transformation chain.

Steps run strictly in order over one response ``R`` and the call
arguments ``A``::

    before_validate(R) → validators(R, *A) → after_validate(R)
    → before_transform chain → transformers(W, *A) → after_transform(T)

A validator failure aborts the chain. A transformer failure is logged and
the fold keeps its last good value. When a catcher is configured it
handles any fault of the whole chain, including the transport call.
"""
from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Mapping, Sequence

import jsonschema
from pydantic import BaseModel, TypeAdapter

from reqdeco.contracts.request import Hook, ResponseSpec, Transformer, Validator
from reqdeco.core.errors import ConfigurationError, ValidationError

logger = logging.getLogger(__name__)


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


async def run_all(hooks: Sequence[Hook], value: Any) -> None:
    """Run side-effect hooks in order; return values are discarded."""
    for hook in hooks:
        await _maybe_await(hook(value))


def _carried_error(result: Any) -> Any:
    if not result:
        return None
    if isinstance(result, Mapping):
        return result.get("error")
    return getattr(result, "error", None)


def _raise_error(error: Any) -> None:
    if isinstance(error, BaseException):
        raise error
    raise ValidationError(str(error), errors=[str(error)])


def _is_model(validator: Any) -> bool:
    return isinstance(validator, type) and issubclass(validator, BaseModel)


async def validate(
    validators: Sequence[Validator],
    data: Any,
    args: Sequence[Any] = (),
    kwargs: Mapping[str, Any] | None = None,
) -> Any:
    """Run every validator against ``data``; the first failure is raised."""
    kwargs = kwargs or {}
    for validator in validators:
        if _is_model(validator):
            validator.model_validate(data)
            continue
        if isinstance(validator, TypeAdapter):
            validator.validate_python(data)
            continue
        if isinstance(validator, Mapping):
            jsonschema.validate(data, validator)
            continue
        if not callable(validator) and callable(getattr(validator, "validate", None)):
            error = _carried_error(await _maybe_await(validator.validate(data)))
            if error:
                _raise_error(error)
            continue
        if not callable(validator):
            logger.warning(
                "Invalid validator type %s. Expected a schema, a pydantic model or a function",
                type(validator).__name__,
            )
            continue

        error = _carried_error(await _maybe_await(validator(data, *args, **kwargs)))
        if error:
            _raise_error(error)
    return data


async def transform(
    transformers: Sequence[Transformer],
    data: Any,
    args: Sequence[Any] = (),
    kwargs: Mapping[str, Any] | None = None,
) -> Any:
    """Fold ``data`` through the transformers.

    A non-callable entry resets the accumulator to ``None``; a raising
    transformer is skipped and the previous accumulator kept.
    """
    kwargs = kwargs or {}
    acc = data
    for transformer in transformers:
        if not callable(transformer):
            logger.warning("The transformer must be a function, got %s", type(transformer).__name__)
            acc = None
            continue
        try:
            acc = await _maybe_await(transformer(acc, *args, **kwargs))
        except Exception:
            logger.warning(
                "Transform failed in %s. Try to add a validator to solve this.",
                getattr(transformer, "__qualname__", repr(transformer)),
                exc_info=True,
            )
    return acc


class ResponsePipeline:
    """Applies one :class:`ResponseSpec` to a dispatched response."""

    def __init__(self, spec: ResponseSpec) -> None:
        self.spec = spec

    async def _chain(
        self,
        response: Awaitable[Any],
        args: Sequence[Any],
        kwargs: Mapping[str, Any],
    ) -> Any:
        """Run hooks, validators and transformers over one response.

        The ``before_transform`` chain falls back to the raw response only
        when it produces ``None``; other falsy values such as ``[]`` or ``0``
        are kept and handed to the transformers.
        """
        spec = self.spec
        data = await response

        await run_all(spec.before_validate, data)
        await validate(spec.validators, data, args, kwargs)
        await run_all(spec.after_validate, data)

        working: Any = None
        if spec.before_transform:
            working = data
            for hook in spec.before_transform:
                working = await _maybe_await(hook(working))

        transformed = await transform(
            spec.transformers,
            working if working is not None else data,
            args,
            kwargs,
        )
        await run_all(spec.after_transform, transformed)
        return transformed

    async def run(
        self,
        response: Awaitable[Any],
        args: Sequence[Any] = (),
        kwargs: Mapping[str, Any] | None = None,
    ) -> Any:
        kwargs = kwargs or {}
        if self.spec.catcher is None:
            return await self._chain(response, args, kwargs)
        try:
            return await self._chain(response, args, kwargs)
        except ConfigurationError:
            raise
        except Exception as exc:
            logger.debug("Response pipeline fault handled by catcher: %r", exc)
            return await _maybe_await(self.spec.catcher(exc))
