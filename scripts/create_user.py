#!/usr/bin/env python3
from __future__ import annotations

from getpass import getpass

from dotenv import load_dotenv

from portal.auth.passwords import PasswordHasher
from portal.auth.users import Role, UserStore
from portal.config import Settings
from portal.errors import ValidationError


def main() -> None:
    load_dotenv()
    settings = Settings.from_env()
    store = UserStore(settings.users_path)
    hasher = PasswordHasher(time_cost=settings.hash_time_cost, memory_cost=settings.hash_memory_cost)

    name = input("Name: ").strip()
    email = input("Email: ").strip()
    role_in = input("Role [user/admin]: ").strip().lower() or Role.USER.value

    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        raise SystemExit("Passwords do not match")

    try:
        user = store.create(name, email, hasher.hash(pw1), Role.parse(role_in))
    except (ValidationError, ValueError) as e:
        raise SystemExit(str(e))
    print(f"OK -> {user.id} ({user.role.value}) in {store.path}")


if __name__ == "__main__":
    main()
