import argparse
import getpass
import sys
from pathlib import Path
from typing import Optional, Sequence

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from moonadmin.accounts import AccountService
from moonadmin.config import ConfigurationError, DatabaseSettings, build_overrides, resolve_config_path
from moonadmin.database import DataStoreError, open_data_store


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a moon mission console account")
    parser.add_argument("first_name", help="First name; its first three letters start the login name")
    parser.add_argument("last_name", help="Last name; its first three letters end the login name")
    parser.add_argument("ssn", help="Social security number stored with the account")
    parser.add_argument(
        "-D",
        dest="define",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Override a configuration setting. May be repeated.",
    )
    parser.add_argument("--config", default=None, help="YAML file of configuration overrides")
    return parser.parse_args(argv)


def prompt_for_password() -> str:
    for _ in range(3):
        password = getpass.getpass("Password: ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            print("Passwords do not match. Try again.", file=sys.stderr)
            continue
        return password
    raise SystemExit("Failed to set password after three attempts.")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)

    try:
        overrides = build_overrides(args.define, resolve_config_path(args.config))
        settings = DatabaseSettings.resolve(overrides)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    password = prompt_for_password()

    try:
        with open_data_store(settings) as store:
            creation = AccountService(store).create_account(
                args.first_name, args.last_name, args.ssn, password
            )
    except DataStoreError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if not creation.created:
        print("Error: the account was not created.", file=sys.stderr)
        return 1

    print(f"Created account with login name '{creation.name}'")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
