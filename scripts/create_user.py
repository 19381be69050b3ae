#!/usr/bin/env python3
"""
Register an account directly against the configured database.

Usage:
  python scripts/create_user.py --username alice [--password secret1]
  python scripts/create_user.py --list
"""
from __future__ import annotations

import argparse
import getpass
import sys

from api.domain.credentials import AuthErrors, UsernamePasswordInput
from api.repositories.sql_repository import SQLRepository
from api.services import auth_service
from api.services.auth_service import AuthContext
from api.services.session_service import SessionHandle


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Create an account")
    ap.add_argument("--username", help="Account name (more than 2 characters)")
    ap.add_argument("--password", help="Password (prompted when omitted)")
    ap.add_argument("--list", action="store_true", help="List existing accounts and exit")
    args = ap.parse_args(argv)

    repo = SQLRepository()
    if args.list:
        for user in repo.list_users():
            print(f"{user.id}\t{user.username}")
        return 0

    username = (args.username or "").strip()
    if not username:
        ap.error("--username is required")
    password = args.password or getpass.getpass("Password: ")

    ctx = AuthContext(session=SessionHandle(repo), users=repo)
    result = auth_service.register(ctx, UsernamePasswordInput(username=username, password=password))
    if isinstance(result, AuthErrors):
        for err in result.errors:
            sys.stderr.write(f"{err.field}: {err.message}\n")
        return 2
    print("OK: account created")
    print(f"  id: {result.user.id}")
    print(f"  username: {result.user.username}")
    return 0


if __name__ == "__main__":
    try:
        raise SystemExit(main())
    except KeyboardInterrupt:  # pragma: no cover - CLI usage
        raise SystemExit(130)
