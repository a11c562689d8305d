"""Tests for tier1_runtime modules."""
from __future__ import annotations

import pytest
from pydantic import BaseModel, Field

from experiments_sdk.tier0_core.errors import TrackingError, ValidationError
from experiments_sdk.tier1_runtime.retry import retry_policy
from experiments_sdk.tier1_runtime.sampling import Sampler, get_sampler, set_sampler, uniform
from experiments_sdk.tier1_runtime.serialize import GroupCodec, GroupListCodec
from experiments_sdk.tier1_runtime.validate import format_cause, validate_input


# ── sampling ───────────────────────────────────────────────────────────────

class TestSampler:
    def test_default_draws_in_unit_interval(self):
        sampler = Sampler()
        for _ in range(100):
            assert 0.0 <= sampler.random() < 1.0

    def test_replay_yields_in_order(self):
        sampler = Sampler.replay([0.1, 0.9])
        assert sampler() == 0.1
        assert sampler() == 0.9

    def test_replay_exhausted(self):
        sampler = Sampler.replay([0.5])
        sampler()
        with pytest.raises(RuntimeError, match="exhausted"):
            sampler()

    def test_linear_sequence_wraps(self):
        sampler = Sampler.linear(4)
        assert [sampler() for _ in range(6)] == [0.0, 0.25, 0.5, 0.75, 0.0, 0.25]

    def test_set_global_sampler(self):
        set_sampler(Sampler.replay([0.42]))
        assert uniform() == 0.42
        assert isinstance(get_sampler(), Sampler)


# ── validate ───────────────────────────────────────────────────────────────

class TestValidate:
    def test_valid_input_returns_model(self):
        class Ref(BaseModel):
            name: str = Field(min_length=1)

        assert validate_input(Ref, {"name": "hero"}).name == "hero"

    def test_invalid_input_raises_sdk_validation_error(self):
        class Ref(BaseModel):
            count: int

        with pytest.raises(ValidationError) as info:
            validate_input(Ref, {"count": "many"})
        assert "count" in info.value.fields

    def test_plain_types_are_supported(self):
        assert validate_input(dict[str, int], {"a": 1}) == {"a": 1}
        with pytest.raises(ValidationError):
            validate_input(dict[str, int], {"a": "x"})

    def test_format_cause_lists_every_field(self):
        error = ValidationError(fields={"testId": "Field required", "groupId": "too short"})
        assert format_cause(error) == "testId: Field required; groupId: too short"

    def test_format_cause_without_fields(self):
        assert format_cause(ValidationError(user_message="Bad")) == "Bad"


# ── serialize ──────────────────────────────────────────────────────────────

class TestGroupCodec:
    codec = GroupCodec()

    def test_encodes_as_json_string(self):
        assert self.codec.encode("a") == '"a"'
        assert self.codec.encode("") == '""'

    @pytest.mark.parametrize("group", ["a", "", "grupo ñ", 'quo"te'])
    def test_roundtrip(self, group):
        assert self.codec.decode(self.codec.encode(group)) == group

    @pytest.mark.parametrize("raw", ['"a', "123", "null", "[]", '{"a": 1}', "", "true"])
    def test_corrupted_or_mistyped_values_decode_to_none(self, raw):
        assert self.codec.decode(raw) is None


class TestGroupListCodec:
    codec = GroupListCodec()

    def test_roundtrip(self):
        assert self.codec.decode(self.codec.encode(["a", "c"])) == ["a", "c"]
        assert self.codec.decode(self.codec.encode([])) == []

    def test_non_string_elements_are_filtered_out(self):
        assert self.codec.decode('["a", 1, null, "b"]') == ["a", "b"]

    @pytest.mark.parametrize("raw", ['["a"', '"a"', "123", "{}", "null"])
    def test_corrupted_or_mistyped_values_decode_to_none(self, raw):
        assert self.codec.decode(raw) is None


# ── retry ──────────────────────────────────────────────────────────────────

class TestRetry:
    @pytest.mark.asyncio
    async def test_retries_listed_errors_then_succeeds(self):
        calls = 0

        @retry_policy(max_attempts=3, min_wait=0, max_wait=0, jitter=0, on=[TrackingError])
        async def flaky():
            nonlocal calls
            calls += 1
            if calls < 3:
                raise TrackingError()
            return "ok"

        assert await flaky() == "ok"
        assert calls == 3

    @pytest.mark.asyncio
    async def test_validation_errors_never_retried(self):
        calls = 0

        @retry_policy(max_attempts=3, min_wait=0, max_wait=0, jitter=0)
        async def invalid():
            nonlocal calls
            calls += 1
            raise ValidationError()

        with pytest.raises(ValidationError):
            await invalid()
        assert calls == 1
