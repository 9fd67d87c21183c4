"""Scripted sessions against the administration console."""

from __future__ import annotations

import io
from datetime import date

import pytest

from moonadmin import create_console
from moonadmin.console import MENU_LINES, AdminConsole, Command, SessionState, parse_command
from moonadmin.database import DataStore, DataStoreError


def _run(store: DataStore, *lines: str) -> tuple[AdminConsole, str]:
    stdin = io.StringIO("".join(f"{line}\n" for line in lines))
    stdout = io.StringIO()
    console = create_console(store, stdin=stdin, stdout=stdout)
    console.run()
    return console, stdout.getvalue()


@pytest.fixture()
def seeded(store: DataStore, add_account, add_mission) -> DataStore:
    add_account(store, "NeiArm", "tranquility")
    add_mission(store, "Apollo 11", date(1969, 7, 16))
    add_mission(store, "Apollo 12", date(1969, 11, 14))
    add_mission(store, "Luna 2", date(1959, 9, 12))
    return store


@pytest.mark.parametrize(
    ("token", "expected"),
    [
        ("1", Command.LIST_MISSIONS),
        ("2", Command.GET_MISSION),
        ("3", Command.COUNT_BY_YEAR),
        ("4", Command.CREATE_ACCOUNT),
        ("5", Command.UPDATE_PASSWORD),
        ("6", Command.DELETE_ACCOUNT),
        ("0", Command.EXIT),
        (" 3 ", None),
        ("0 ", None),
        ("7", None),
        ("", None),
        ("list", None),
        (None, None),
    ],
)
def test_parse_command(token, expected) -> None:
    assert parse_command(token) is expected


def test_failed_login_then_exit_never_shows_menu(seeded: DataStore) -> None:
    console, output = _run(seeded, "NeiArm", "wrong", "0")

    assert "Invalid username or password" in output
    assert MENU_LINES[0] not in output
    assert console.state is SessionState.TERMINATED
    assert not console.session.authenticated


def test_failed_login_retries_until_exit(seeded: DataStore) -> None:
    _, output = _run(
        seeded,
        "nobody", "x", "again",
        "NeiArm", "wrong", "",
        "NeiArm", "Tranquility", "0",
    )

    assert output.count("Username: ") == 3
    assert output.count("Invalid username or password") == 3
    assert MENU_LINES[0] not in output


def test_retry_can_reach_the_menu(seeded: DataStore) -> None:
    console, output = _run(seeded, "NeiArm", "wrong", "retry", "NeiArm", "tranquility", "0")

    assert console.session.authenticated
    assert console.session.username == "NeiArm"
    assert all(line in output for line in MENU_LINES)
    assert "Goodbye!" in output


def test_padded_exit_token_returns_to_login(seeded: DataStore) -> None:
    console, output = _run(seeded, "NeiArm", "wrong", " 0", "NeiArm", "wrong", "0")

    assert output.count("Username: ") == 2
    assert console.state is SessionState.TERMINATED
    assert not console.session.authenticated


def test_padded_menu_choice_is_an_invalid_option(seeded: DataStore) -> None:
    console, output = _run(seeded, "NeiArm", "tranquility", " 1", "0 ", "0")

    assert output.count("Invalid option") == 2
    assert "Apollo 12" not in output
    assert "Goodbye!" in output
    assert console.state is SessionState.TERMINATED


def test_list_missions(seeded: DataStore) -> None:
    _, output = _run(seeded, "NeiArm", "tranquility", "1", "0")

    listed = output.index("Apollo 11")
    assert listed < output.index("Apollo 12") < output.index("Luna 2")


def test_get_mission_outcomes(seeded: DataStore) -> None:
    _, output = _run(
        seeded, "NeiArm", "tranquility",
        "2", "1",
        "2", "77",
        "2", "Apollo",
        "0",
    )

    assert "1) Apollo 11 - launched 1969-07-16" in output
    assert "No moon mission found with mission_id 77." in output
    assert "Invalid mission_id. Please enter a whole number." in output


def test_count_missions_by_year(seeded: DataStore) -> None:
    _, output = _run(
        seeded, "NeiArm", "tranquility",
        "3", "1969",
        "3", "1970",
        "3", "0",
        "3", "soon",
        "0",
    )

    assert "2 mission(s) launched in 1969" in output
    assert "0 mission(s) launched in 1970" in output
    assert "Year must be between 1 and " in output
    assert "Invalid year. Please enter a whole number." in output


def test_invalid_option_keeps_menu_active(seeded: DataStore) -> None:
    console, output = _run(seeded, "NeiArm", "tranquility", "9", "1", "0")

    assert "Invalid option" in output
    assert output.count(MENU_LINES[-1]) == 3
    assert console.state is SessionState.TERMINATED


def test_create_update_and_delete_account(seeded: DataStore, account_rows) -> None:
    _, output = _run(
        seeded, "NeiArm", "tranquility",
        "4", "Buzz", "Aldrin", "100-00-0002", "eagle",
        "0",
    )
    assert "Account created. Username: BuzAld" in output
    buzz_id = next(row["user_id"] for row in account_rows(seeded) if row["name"] == "BuzAld")

    _, output = _run(
        seeded, "BuzAld", "eagle",
        "5", str(buzz_id), "columbia",
        "5", "404", "columbia",
        "5", "buzz", "columbia",
        "0",
    )
    assert "Password updated." in output
    assert "Failed to update password: no account with user_id 404." in output
    assert "Invalid user_id. Please enter a whole number." in output

    _, output = _run(
        seeded, "BuzAld", "columbia",
        "6", str(buzz_id),
        "6", str(buzz_id),
        "0",
    )
    assert "Account deleted." in output
    assert f"Failed to delete account: no account with user_id {buzz_id}." in output
    assert [row["name"] for row in account_rows(seeded)] == ["NeiArm"]


def test_end_of_input_terminates_session(seeded: DataStore) -> None:
    console, _ = _run(seeded, "NeiArm")

    assert console.state is SessionState.TERMINATED

    console, _ = _run(seeded, "NeiArm", "tranquility", "2")
    assert console.state is SessionState.TERMINATED


def test_store_failure_escapes_the_session(bare_store: DataStore) -> None:
    with pytest.raises(DataStoreError, match="Login query failed"):
        _run(bare_store, "NeiArm", "tranquility", "0")


def test_custom_password_reader_is_used(seeded: DataStore) -> None:
    prompts = []

    def read_password(prompt: str) -> str:
        prompts.append(prompt)
        return "tranquility"

    stdin = io.StringIO("NeiArm\n0\n")
    stdout = io.StringIO()
    console = create_console(seeded, stdin=stdin, stdout=stdout, read_password=read_password)
    console.run()

    assert prompts == ["Password: "]
    assert console.session.authenticated
