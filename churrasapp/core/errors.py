"""
Error hierarchy for domain and infrastructure failures
"""

from typing import Any, Dict, List, Optional


class ChurrasError(Exception):
    """Base class for errors the API knows how to report"""

    code = "CHURRAS_ERROR"
    http_status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(ChurrasError):
    """One or more fields failed validation.

    ``errors`` lists every failed field as ``{"field": ..., "message": ...}``.
    """

    code = "VALIDATION_ERROR"
    http_status = 400

    def __init__(self, errors: List[Dict[str, Any]], message: str = "Dados inválidos"):
        super().__init__(message)
        self.errors = errors

    @property
    def first_field(self) -> Optional[str]:
        return self.errors[0]["field"] if self.errors else None


class DomainRuleViolation(ValidationFailed):
    """A business rule rejected the record (e.g. the parent event is cancelled)"""

    code = "DOMAIN_RULE_VIOLATION"

    def __init__(self, field: str, message: str):
        super().__init__([{"field": field, "message": message}], message=message)


class TemplateNotFound(ChurrasError):
    code = "TEMPLATE_NOT_FOUND"
    http_status = 404

    def __init__(self, template_id: str):
        super().__init__("Template não encontrado")
        self.template_id = template_id


class DatabaseConnectionError(ChurrasError):
    """The database could not be reached after every retry"""

    code = "DATABASE_UNAVAILABLE"
    http_status = 503
