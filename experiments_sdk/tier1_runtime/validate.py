"""
experiments_sdk.tier1_runtime.validate
────────────────────────────────────────
Input/schema validation via Pydantic v2. Raises the SDK ValidationError
(not raw Pydantic errors) so callers always see the same error shape.
"""
from __future__ import annotations

from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from experiments_sdk.tier0_core.errors import ValidationError

T = TypeVar("T")


def _field_errors(exc: PydanticValidationError) -> dict[str, str]:
    return {
        ".".join(str(loc) for loc in err["loc"]) or "(root)": err["msg"]
        for err in exc.errors()
    }


def validate_input(model: Any, data: Any) -> Any:
    """
    Validate raw data against a Pydantic model or any type TypeAdapter accepts.
    Raises experiments_sdk ValidationError (not Pydantic's) on failure.

    Usage:
        ref = validate_input(ExperimentReference, {"testId": "hero", "groupId": "b"})
        defs = validate_input(dict[str, Experiment], raw_definitions)
    """
    try:
        if hasattr(model, "model_validate"):
            return model.model_validate(data)
        return TypeAdapter(model).validate_python(data)
    except PydanticValidationError as exc:
        raise ValidationError(
            code="validation_error",
            user_message="Validation failed.",
            fields=_field_errors(exc),
        ) from exc


def format_cause(error: ValidationError) -> str:
    """
    Render field-level causes as a single line for log messages, e.g.
    ``testId: Field required; groupId: Input should be a valid string``.
    """
    if not error.fields:
        return error.detail
    return "; ".join(f"{path}: {message}" for path, message in error.fields.items())


__all__ = ["validate_input", "format_cause"]
