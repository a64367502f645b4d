"""Request body parsing that reports failures as data instead of raising."""

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError

from app.core.exceptions import InvalidInputError, issues_from_errors

M = TypeVar("M", bound=BaseModel)


@dataclass
class ParseResult(Generic[M]):
    value: M | None = None
    issues: list[dict[str, Any]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.value is not None


def parse_body(model: type[M], payload: Any) -> ParseResult[M]:
    """Validate a decoded JSON payload against model; Ok(value) or Err(issues)."""
    if not isinstance(payload, dict):
        return ParseResult(issues=[{"path": [], "message": "Expected a JSON object"}])
    try:
        return ParseResult(value=model.model_validate(payload))
    except ValidationError as e:
        return ParseResult(issues=issues_from_errors(e.errors()))


async def parse_request(request: Request, model: type[M]) -> ParseResult[M]:
    try:
        payload = await request.json()
    except ValueError:
        return ParseResult(issues=[{"path": [], "message": "Malformed JSON body"}])
    return parse_body(model, payload)


async def require_body(request: Request, model: type[M]) -> M:
    """Boundary helper: convert a failed parse into InvalidInputError."""
    result = await parse_request(request, model)
    if not result.ok:
        raise InvalidInputError(issues=result.issues)
    return result.value
