"""Request body validation rules applied before the core runs."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping, Pattern

VALIDATION_ERROR_MESSAGE = "Erro de validação dos campos"
PHONE_PATTERN = re.compile(r"^\(\d{2}\)\s\d{4,5}-\d{4}$")

_TYPE_NAMES = {str: "string", int: "number", bool: "boolean"}


@dataclass(frozen=True)
class FieldRule:
    name: str
    required: bool = True
    type: type = str
    min_length: int | None = None
    pattern: Pattern[str] | None = None


USER_RULES = (
    FieldRule("username", min_length=3),
    FieldRule("password", min_length=6),
)

CONTACT_RULES = (
    FieldRule("name", min_length=2),
    FieldRule("phone", pattern=PHONE_PATTERN),
)


def validate_body(body: Any, rules: tuple[FieldRule, ...]) -> list[str]:
    """Return the list of violated-rule messages (empty when the body is valid)."""
    payload: Mapping[str, Any] = body if isinstance(body, Mapping) else {}
    errors: list[str] = []
    for rule in rules:
        value = payload.get(rule.name)
        if value is None or value == "":
            if rule.required:
                errors.append(f"Campo obrigatório: {rule.name}")
            continue
        if not isinstance(value, rule.type) or (rule.type is int and isinstance(value, bool)):
            errors.append(f"Campo {rule.name} deve ser do tipo {_TYPE_NAMES.get(rule.type, rule.type.__name__)}")
            continue
        if rule.min_length is not None and len(value) < rule.min_length:
            errors.append(f"Campo {rule.name} deve ter no mínimo {rule.min_length} caracteres")
        if rule.pattern is not None and not rule.pattern.fullmatch(value):
            errors.append(f"Campo {rule.name} não corresponde ao formato esperado")
    return errors
