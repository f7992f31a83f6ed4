"""Input validation helpers."""

from __future__ import annotations

from typing import Type, TypeVar

from flask import request
from pydantic import BaseModel, ValidationError

from habit_tks.core.errors import RequestValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_body(model: Type[ModelT]) -> ModelT:
    """Validate the JSON request body against ``model``."""
    payload = request.get_json(silent=True) or {}
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise RequestValidationError(
            "Invalid request body",
            details=exc.errors(include_url=False, include_context=False),
        ) from exc
