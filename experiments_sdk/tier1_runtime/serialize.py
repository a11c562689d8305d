"""
experiments_sdk.tier1_runtime.serialize
─────────────────────────────────────────
Stored-assignment codecs. Each codec turns an assignment value into the JSON
string written to a storage tier and back.

Decoding is corruption-tolerant: invalid JSON or an unexpected shape decodes
to None, which callers treat exactly like a missing value.

Wire format:
    A/B           '"groupA"'          ('""' marks a traffic exclusion)
    multivariate  '["red", "large"]'  ('[]' marks a traffic exclusion)
"""
from __future__ import annotations

import json
from typing import Any, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")

_MISSING: Any = object()


@runtime_checkable
class Codec(Protocol[T]):
    def encode(self, value: T) -> str: ...

    def decode(self, raw: str) -> T | None: ...


def _loads(raw: str) -> Any:
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return _MISSING


class GroupCodec:
    """A single group name; the empty string stands for "excluded"."""

    def encode(self, value: str) -> str:
        return json.dumps(value)

    def decode(self, raw: str) -> str | None:
        value = _loads(raw)
        if isinstance(value, str):
            return value
        return None


class GroupListCodec:
    """One variant per factor. Non-string elements are dropped on decode."""

    def encode(self, value: list[str]) -> str:
        return json.dumps(list(value))

    def decode(self, raw: str) -> list[str] | None:
        value = _loads(raw)
        if not isinstance(value, list):
            return None
        return [element for element in value if isinstance(element, str)]


__all__ = ["Codec", "GroupCodec", "GroupListCodec"]
