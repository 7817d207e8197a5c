#!/usr/bin/env python3
"""
Cadastrar um usuario diretamente no banco (mesmas regras do POST /users).

Uso:
  python scripts/add_user.py --username alice [--password segredo]
"""
from __future__ import annotations

import argparse
import getpass
import sys
from pathlib import Path

# Garantir que o pacote contacts_api seja importável quando rodado diretamente
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from contacts_api.domain.results import Err, ErrorKind
from contacts_api.domain.validation import USER_RULES, validate_body
from contacts_api.repositories.sql_repository import SQLRepository
from contacts_api.services.credential_service import CredentialStore


def main() -> None:
    ap = argparse.ArgumentParser(description="Cadastrar usuario no banco")
    ap.add_argument("--username", required=True, help="Nome de usuario (min. 3 caracteres)")
    ap.add_argument("--password", help="Senha (default: pergunta no terminal)")
    args = ap.parse_args()

    username = (args.username or "").strip()
    password = args.password or getpass.getpass("Senha: ")
    errors = validate_body({"username": username, "password": password}, USER_RULES)
    if errors:
        raise SystemExit("; ".join(errors))

    outcome = CredentialStore(SQLRepository()).register(username, password)
    if isinstance(outcome, Err):
        if outcome.kind is ErrorKind.DUPLICATE_IDENTITY:
            raise SystemExit(f"Usuario '{username}' ja existe")
        raise SystemExit("Falha ao gravar usuario")
    print("OK: usuario cadastrado")
    print(f"  ID: {outcome.value.id}")
    print(f"  Username: {outcome.value.username}")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - uso CLI
        sys.stderr.write(f"Erro: {exc}\n")
        raise SystemExit(1)
