"""
Common Pydantic schemas
"""

from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from churrasapp.core.errors import ValidationFailed


class Envelope(BaseModel):
    """Uniform response body: every JSON response carries data, error and meta"""
    data: Optional[Any] = None
    error: Optional[str] = None
    meta: Dict[str, Any]


class CamelModel(BaseModel):
    """Input model accepting camelCase (wire) or snake_case (Python) keys"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class ResponseModel(BaseModel):
    """Output model read from ORM objects and dumped with camelCase keys"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    def dump(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


_MESSAGES = {
    "missing": "Campo obrigatório",
    "string_type": "Deve ser um texto",
    "string_too_short": "Deve ter pelo menos {min_length} caracteres",
    "string_too_long": "Deve ter no máximo {max_length} caracteres",
    "string_pattern_mismatch": "Formato inválido",
    "literal_error": "Valor deve ser: {expected}",
    "greater_than_equal": "Deve ser maior ou igual a {ge}",
    "less_than_equal": "Deve ser menor ou igual a {le}",
    "int_type": "Deve ser um número inteiro",
    "int_parsing": "Deve ser um número inteiro",
    "int_from_float": "Deve ser um número inteiro",
    "float_type": "Deve ser um número",
    "float_parsing": "Deve ser um número",
    "finite_number": "Deve ser um número finito",
    "bool_type": "Deve ser verdadeiro ou falso",
    "bool_parsing": "Deve ser verdadeiro ou falso",
    "datetime_type": "Data inválida",
    "datetime_parsing": "Data inválida",
    "datetime_from_date_parsing": "Data inválida",
}


def wire_name(field: str) -> str:
    """snake_case field name to its camelCase wire name"""
    head, *rest = field.split("_")
    if not head:
        return field
    return head + "".join(part.capitalize() for part in rest)


def collect_errors(raw_errors, skip=()) -> List[Dict[str, str]]:
    """Flatten pydantic error dicts into ``[{"field", "message"}]`` with Portuguese messages.

    ``skip`` drops location prefixes such as FastAPI's ``"body"``.
    """
    errors = []
    for e in raw_errors:
        ctx = e.get("ctx") or {}
        loc = [str(part) for part in e["loc"] if not isinstance(part, int) and part not in skip]
        # model-level rules carry their field in the error context
        field = wire_name(loc[0]) if loc else ctx.get("field", "__root__")
        template = _MESSAGES.get(e["type"])
        message = template.format(**ctx) if template else e["msg"]
        errors.append({"field": field, "message": message})
    return errors


def custom_error_to_failure(error: PydanticCustomError) -> ValidationFailed:
    field = (error.context or {}).get("field", "__root__")
    return ValidationFailed([{"field": field, "message": error.message()}])


M = TypeVar("M", bound=BaseModel)


def parse_or_fail(model: Type[M], payload: Any) -> M:
    """Validate ``payload`` against ``model`` raising ValidationFailed with every failed field"""
    if isinstance(payload, model):
        return payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(exclude_unset=True)
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationFailed(collect_errors(e.errors())) from e
