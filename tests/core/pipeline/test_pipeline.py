from __future__ import annotations

import logging

import jsonschema
import pydantic
import pytest
from pydantic import BaseModel, TypeAdapter

from reqdeco.contracts.request import ResponseSpec
from reqdeco.core.errors import ConfigurationError, ValidationError
from reqdeco.core.pipeline import ResponsePipeline, transform, validate


class User(BaseModel):
    id: int
    name: str


USER_SCHEMA = {
    "type": "object",
    "required": ["id"],
    "properties": {"id": {"type": "integer"}},
}


async def response(value):
    return value


async def failing_response():
    raise ConnectionError("down")


def warnings_from(caplog) -> list[logging.LogRecord]:
    return [
        r for r in caplog.records
        if r.name == "reqdeco.core.pipeline" and r.levelno == logging.WARNING
    ]


class TestValidate:
    @pytest.mark.asyncio
    async def test_no_validators_returns_data(self):
        assert await validate([], {"a": 1}) == {"a": 1}

    @pytest.mark.asyncio
    async def test_pydantic_model(self):
        await validate([User], {"id": 1, "name": "ada"})

        with pytest.raises(pydantic.ValidationError):
            await validate([User], {"id": "x"})

    @pytest.mark.asyncio
    async def test_type_adapter(self):
        with pytest.raises(pydantic.ValidationError):
            await validate([TypeAdapter(list[int])], ["a"])

    @pytest.mark.asyncio
    async def test_json_schema_mapping(self):
        await validate([USER_SCHEMA], {"id": 1})

        with pytest.raises(jsonschema.ValidationError):
            await validate([USER_SCHEMA], {"name": "no id"})

    @pytest.mark.asyncio
    async def test_schema_object_with_validate(self):
        validator = jsonschema.Draft202012Validator(USER_SCHEMA)

        with pytest.raises(jsonschema.ValidationError):
            await validate([validator], {"id": "one"})

    @pytest.mark.asyncio
    async def test_function_receives_call_arguments(self):
        seen = []

        def check(data, *args, **kwargs):
            seen.append((data, args, kwargs))

        await validate([check], {"id": 1}, (7,), {"lang": "en"})

        assert seen == [({"id": 1}, (7,), {"lang": "en"})]

    @pytest.mark.asyncio
    async def test_function_error_message_is_wrapped(self):
        with pytest.raises(ValidationError, match="empty result"):
            await validate([lambda data: {"error": "empty result"}], [])

    @pytest.mark.asyncio
    async def test_function_error_exception_is_raised_as_is(self):
        error = LookupError("missing")

        with pytest.raises(LookupError) as exc_info:
            await validate([lambda data: {"error": error}], [])

        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_async_validator(self):
        async def check(data):
            raise ValidationError("async says no")

        with pytest.raises(ValidationError, match="async says no"):
            await validate([check], {})

    @pytest.mark.asyncio
    async def test_invalid_entry_is_skipped_with_warning(self, caplog):
        await validate([42], {"id": 1})

        assert "Invalid validator type int" in caplog.text

    @pytest.mark.asyncio
    async def test_first_failure_stops_remaining_validators(self):
        calls = []

        def first(data):
            calls.append("first")
            raise ValidationError("first failed")

        def second(data):
            calls.append("second")

        with pytest.raises(ValidationError):
            await validate([first, second], {})

        assert calls == ["first"]


class TestTransform:
    @pytest.mark.asyncio
    async def test_folds_left_to_right(self):
        result = await transform([lambda d: d + [1], lambda d: d + [2]], [])

        assert result == [1, 2]

    @pytest.mark.asyncio
    async def test_transformers_receive_call_arguments(self):
        result = await transform([lambda d, factor: d * factor], 3, (4,))

        assert result == 12

    @pytest.mark.asyncio
    async def test_async_transformer(self):
        async def double(d):
            return d * 2

        assert await transform([double], 5) == 10

    @pytest.mark.asyncio
    async def test_raising_transformer_keeps_previous_value(self, caplog):
        def boom(d):
            raise KeyError("nope")

        result = await transform([lambda d: d + 1, boom, lambda d: d * 10], 1)

        assert result == 20
        assert len(warnings_from(caplog)) == 1

    @pytest.mark.asyncio
    async def test_non_callable_resets_accumulator(self, caplog):
        result = await transform([lambda d: d + 1, "oops", lambda d: d], 1)

        assert result is None
        assert "The transformer must be a function" in caplog.text


class TestResponsePipeline:
    @pytest.mark.asyncio
    async def test_steps_run_in_order(self):
        events = []

        spec = ResponseSpec(
            before_validate=[lambda r: events.append(("before_validate", r))],
            validators=[lambda r: events.append(("validate", r))],
            after_validate=[lambda r: events.append(("after_validate", r))],
            before_transform=[lambda r: events.append(("before_transform", r)) or r + 1],
            transformers=[lambda r: events.append(("transform", r)) or r * 2],
            after_transform=[lambda r: events.append(("after_transform", r))],
        )

        result = await ResponsePipeline(spec).run(response(1))

        assert result == 4
        assert events == [
            ("before_validate", 1),
            ("validate", 1),
            ("after_validate", 1),
            ("before_transform", 1),
            ("transform", 2),
            ("after_transform", 4),
        ]

    @pytest.mark.asyncio
    async def test_before_transform_hooks_chain(self):
        spec = ResponseSpec(
            before_transform=[lambda r: r + ["a"], lambda r: r + ["b"]],
            transformers=[lambda r: r + ["t"]],
        )

        assert await ResponsePipeline(spec).run(response([])) == ["a", "b", "t"]

    @pytest.mark.asyncio
    async def test_before_transform_none_falls_back_to_response(self):
        spec = ResponseSpec(before_transform=[lambda r: None], transformers=[lambda r: r])

        assert await ResponsePipeline(spec).run(response({"a": 1})) == {"a": 1}

    @pytest.mark.asyncio
    async def test_before_transform_falsy_result_is_kept(self):
        spec = ResponseSpec(before_transform=[lambda r: []], transformers=[lambda r: r])

        assert await ResponsePipeline(spec).run(response({"a": 1})) == []

    @pytest.mark.asyncio
    async def test_async_hooks_are_awaited(self):
        seen = []

        async def record(value):
            seen.append(value)

        spec = ResponseSpec(before_validate=[record], after_transform=[record])

        await ResponsePipeline(spec).run(response("r"))

        assert seen == ["r", "r"]

    @pytest.mark.asyncio
    async def test_validation_error_aborts_chain(self):
        transformed = []
        error = ValidationError("bad payload")

        def reject(data):
            raise error

        spec = ResponseSpec(
            validators=[reject],
            after_validate=[lambda r: transformed.append("after_validate")],
            transformers=[lambda r: transformed.append("transform")],
        )

        with pytest.raises(ValidationError) as exc_info:
            await ResponsePipeline(spec).run(response({}))

        assert exc_info.value is error
        assert transformed == []

    @pytest.mark.asyncio
    async def test_catcher_replaces_validation_failure(self):
        def reject(data):
            raise ValidationError("bad payload")

        spec = ResponseSpec(validators=[reject], catcher=lambda exc: {"error": str(exc)})

        assert await ResponsePipeline(spec).run(response({})) == {"error": "bad payload"}

    @pytest.mark.asyncio
    async def test_catcher_handles_transport_failure(self):
        caught = []

        spec = ResponseSpec(catcher=caught.append)

        assert await ResponsePipeline(spec).run(failing_response()) is None
        assert isinstance(caught[0], ConnectionError)

    @pytest.mark.asyncio
    async def test_async_catcher(self):
        async def fallback(exc):
            return "fallback"

        spec = ResponseSpec(catcher=fallback)

        assert await ResponsePipeline(spec).run(failing_response()) == "fallback"

    @pytest.mark.asyncio
    async def test_transport_failure_without_catcher_propagates(self):
        with pytest.raises(ConnectionError):
            await ResponsePipeline(ResponseSpec()).run(failing_response())

    @pytest.mark.asyncio
    async def test_configuration_error_bypasses_catcher(self):
        caught = []

        async def misconfigured():
            raise ConfigurationError("HTTP client returned nothing")

        spec = ResponseSpec(catcher=caught.append)

        with pytest.raises(ConfigurationError, match="returned nothing"):
            await ResponsePipeline(spec).run(misconfigured())

        assert caught == []
