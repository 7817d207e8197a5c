"""Response envelope and outcome-to-HTTP mapping shared by all routers."""
from __future__ import annotations

from typing import Any

from fastapi.responses import JSONResponse

from contacts_api.domain.results import Err, ErrorKind
from contacts_api.domain.validation import VALIDATION_ERROR_MESSAGE

NO_TOKEN = "Token não fornecido"
UNAUTHORIZED = "Token expirado ou inválido"
INTERNAL_ERROR = "Erro interno do servidor."

_STATUS = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.DUPLICATE_IDENTITY: 400,
    ErrorKind.INVALID_CREDENTIALS: 401,
    ErrorKind.TOKEN_MALFORMED: 401,
    ErrorKind.TOKEN_EXPIRED: 401,
    ErrorKind.TOKEN_REVOKED: 401,
    ErrorKind.RESOURCE_NOT_FOUND: 404,
    ErrorKind.INTERNAL: 500,
}

# Fixed per kind so store messages never reach the client.
_MESSAGES = {
    ErrorKind.VALIDATION: VALIDATION_ERROR_MESSAGE,
    ErrorKind.DUPLICATE_IDENTITY: "Usuário já existe.",
    ErrorKind.INVALID_CREDENTIALS: "Credenciais inválidas.",
    ErrorKind.TOKEN_MALFORMED: UNAUTHORIZED,
    ErrorKind.TOKEN_EXPIRED: UNAUTHORIZED,
    ErrorKind.TOKEN_REVOKED: UNAUTHORIZED,
    ErrorKind.RESOURCE_NOT_FOUND: "Contato não encontrado.",
    ErrorKind.INTERNAL: INTERNAL_ERROR,
}


def status_for(kind: ErrorKind) -> int:
    return _STATUS.get(kind, 500)


def message_for(kind: ErrorKind) -> str:
    return _MESSAGES.get(kind, INTERNAL_ERROR)


def success(data: dict[str, Any], status_code: int = 200) -> JSONResponse:
    return JSONResponse({"success": True, "data": data}, status_code=status_code)


def failure(message: str, status_code: int, data: Any = None) -> JSONResponse:
    body: dict[str, Any] = {"success": False, "error": message}
    if data is not None:
        body["data"] = data
    return JSONResponse(body, status_code=status_code)


def from_error(err: Err) -> JSONResponse:
    return failure(message_for(err.kind), status_for(err.kind))


def validation_failure(errors: list[str]) -> JSONResponse:
    return failure(VALIDATION_ERROR_MESSAGE, 400, data=errors)
