"""Request validation adapter.

Routes depend on ``ValidationPipe(Schema)`` instead of declaring the schema as a
body parameter, so every failure leaves the API in one shape::

    {"message": "Validation failed",
     "errors": [{"field": "email", "message": "...", "code": "invalid_email"}]}
"""
from typing import Any, Generic, Iterable, List, Optional, Type, TypeVar

from fastapi import Body, HTTPException, status
from pydantic import BaseModel, ValidationError

from app.core.logging import get_logger


logger = get_logger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

VALIDATION_FAILED = "Validation failed"


class ValidationFailed(HTTPException):
    """400 response carrying structured per-field problems."""

    def __init__(self, errors: Optional[List[dict]] = None):
        self.errors = errors or []
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": VALIDATION_FAILED, "errors": self.errors},
        )


def format_errors(errors: Iterable[dict]) -> List[dict]:
    """Translate pydantic error dicts into ``{field, message, code}`` entries."""
    return [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg", VALIDATION_FAILED),
            "code": error.get("type", "invalid"),
        }
        for error in errors
    ]


def validate_payload(schema: Type[SchemaT], value: Any) -> SchemaT:
    """Validate ``value`` against ``schema`` or raise ``ValidationFailed``."""
    try:
        return schema.model_validate(value)
    except ValidationError as exc:
        errors = format_errors(exc.errors(include_url=False, include_context=False))
        logger.info(
            f"Validation failed for {schema.__name__}: "
            f"{[e['field'] for e in errors]}"
        )
        raise ValidationFailed(errors) from exc
    except (TypeError, ValueError) as exc:
        # Failure without a structured error list
        logger.warning(f"Unstructured validation failure for {schema.__name__}: {exc}")
        raise ValidationFailed() from exc


class ValidationPipe(Generic[SchemaT]):
    """FastAPI dependency validating the raw JSON body against a schema."""

    def __init__(self, schema: Type[SchemaT]):
        self.schema = schema

    async def __call__(self, body: Any = Body(None)) -> SchemaT:
        return validate_payload(self.schema, body)
