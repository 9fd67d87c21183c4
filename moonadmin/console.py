"""Interactive administration console for moon missions and accounts."""
from __future__ import annotations

import enum
import getpass
import logging
import sys
from typing import Callable, Dict, Optional, TextIO

from .accounts import AccountService, MutationOutcome
from .auth import Authenticator
from .missions import CountStatus, LookupStatus, MissionQueryService
from .models import Session

logger = logging.getLogger("moonadmin.console")

EXIT_TOKEN = "0"

MENU_LINES = (
    "1) List moon missions",
    "2) Get a moon mission by mission_id",
    "3) Count missions for a given year",
    "4) Create an account",
    "5) Update an account password",
    "6) Delete an account",
    "0) Exit",
)


class Command(enum.Enum):
    """Menu actions keyed by the token the operator types."""

    LIST_MISSIONS = "1"
    GET_MISSION = "2"
    COUNT_BY_YEAR = "3"
    CREATE_ACCOUNT = "4"
    UPDATE_PASSWORD = "5"
    DELETE_ACCOUNT = "6"
    EXIT = EXIT_TOKEN


def parse_command(token: Optional[str]) -> Optional[Command]:
    if token is None:
        return None
    try:
        return Command(token)
    except ValueError:
        return None


class SessionState(enum.Enum):
    LOGGED_OUT = "logged_out"
    AUTH_RETRY = "auth_retry"
    MENU_ACTIVE = "menu_active"
    TERMINATED = "terminated"


class AdminConsole:
    """Drive login and the main menu over line-oriented streams.

    The console never catches :class:`~moonadmin.database.DataStoreError`;
    store failures end the session and are left to the caller.
    """

    def __init__(
        self,
        authenticator: Authenticator,
        missions: MissionQueryService,
        accounts: AccountService,
        *,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        read_password: Optional[Callable[[str], str]] = None,
    ) -> None:
        self._authenticator = authenticator
        self._missions = missions
        self._accounts = accounts
        self._stdin = stdin if stdin is not None else sys.stdin
        self._stdout = stdout if stdout is not None else sys.stdout
        if read_password is None:
            read_password = self._default_password_reader()
        self._read_password = read_password
        self.session = Session()
        self.state = SessionState.LOGGED_OUT
        self._handlers: Dict[Command, Callable[[], None]] = {
            Command.LIST_MISSIONS: self._list_missions,
            Command.GET_MISSION: self._get_mission,
            Command.COUNT_BY_YEAR: self._count_missions_by_year,
            Command.CREATE_ACCOUNT: self._create_account,
            Command.UPDATE_PASSWORD: self._update_password,
            Command.DELETE_ACCOUNT: self._delete_account,
        }

    def _default_password_reader(self) -> Callable[[str], str]:
        if self._stdin is sys.stdin and sys.stdin.isatty():
            return getpass.getpass
        return self._read_line

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------
    def run(self) -> Session:
        """Run until the operator exits or input is exhausted."""

        try:
            while self.state is not SessionState.TERMINATED:
                self.state = self._step(self.state)
        except EOFError:
            logger.info("Input closed; ending session")
            self.state = SessionState.TERMINATED
        return self.session

    def _step(self, state: SessionState) -> SessionState:
        if state is SessionState.LOGGED_OUT:
            return self._login()
        if state is SessionState.AUTH_RETRY:
            return self._retry_prompt()
        if state is SessionState.MENU_ACTIVE:
            return self._menu()
        return SessionState.TERMINATED

    def _login(self) -> SessionState:
        username = self._read_line("Username: ")
        password = self._read_password("Password: ")

        if self._authenticator.validate_login(username, password):
            self.session.authenticated = True
            self.session.username = username
            self._print(f"Welcome, {username}!")
            return SessionState.MENU_ACTIVE
        return SessionState.AUTH_RETRY

    def _retry_prompt(self) -> SessionState:
        self._print("Invalid username or password")
        choice = self._read_line("0) Exit ")
        if choice == EXIT_TOKEN:
            return SessionState.TERMINATED
        return SessionState.LOGGED_OUT

    def _menu(self) -> SessionState:
        self._print()
        for line in MENU_LINES:
            self._print(line)

        command = parse_command(self._read_line("Enter choice: "))
        if command is None:
            self._print("Invalid option")
            return SessionState.MENU_ACTIVE
        if not self.dispatch(command):
            return SessionState.TERMINATED
        return SessionState.MENU_ACTIVE

    def dispatch(self, command: Command) -> bool:
        """Run the handler for ``command``; return ``False`` when the session should end."""

        if command is Command.EXIT:
            self._print("Goodbye!")
            return False
        self._handlers[command]()
        return True

    # ------------------------------------------------------------------
    # Mission handlers
    # ------------------------------------------------------------------
    def _list_missions(self) -> None:
        for spacecraft in self._missions.list_missions():
            self._print(spacecraft)

    def _get_mission(self) -> None:
        lookup = self._missions.find_mission(self._read_line("mission_id: "))

        if lookup.status is LookupStatus.INVALID_ID:
            self._print("Invalid mission_id. Please enter a whole number.")
        elif lookup.status is LookupStatus.NOT_FOUND:
            self._print(f"No moon mission found with mission_id {lookup.mission_id}.")
        else:
            mission = lookup.mission
            launched = mission.launch_date.isoformat() if mission.launch_date else "unknown"
            self._print(f"{mission.mission_id}) {mission.spacecraft} - launched {launched}")

    def _count_missions_by_year(self) -> None:
        result = self._missions.count_missions_by_year(self._read_line("Year: "))

        if result.status is CountStatus.INVALID_YEAR:
            self._print("Invalid year. Please enter a whole number.")
        elif result.status is CountStatus.OUT_OF_RANGE:
            self._print(f"Year must be between 1 and {result.max_year}.")
        else:
            self._print(f"{result.count} mission(s) launched in {result.year}")

    # ------------------------------------------------------------------
    # Account handlers
    # ------------------------------------------------------------------
    def _create_account(self) -> None:
        first_name = self._read_line("First name: ")
        last_name = self._read_line("Last name: ")
        ssn = self._read_line("SSN: ")
        password = self._read_password("Password: ")

        creation = self._accounts.create_account(first_name, last_name, ssn, password)
        if creation.created:
            self._print(f"Account created. Username: {creation.name}")
        else:
            self._print("Failed to create account.")

    def _update_password(self) -> None:
        raw_user_id = self._read_line("user_id: ")
        new_password = self._read_password("New password: ")

        outcome = self._accounts.update_password(raw_user_id, new_password)
        self._report_mutation(outcome, raw_user_id, "Password updated.", "update password")

    def _delete_account(self) -> None:
        raw_user_id = self._read_line("user_id: ")

        outcome = self._accounts.delete_account(raw_user_id)
        self._report_mutation(outcome, raw_user_id, "Account deleted.", "delete account")

    def _report_mutation(self, outcome: MutationOutcome, raw_user_id: str, success: str, action: str) -> None:
        if outcome is MutationOutcome.INVALID_ID:
            self._print("Invalid user_id. Please enter a whole number.")
        elif outcome is MutationOutcome.FAILED:
            self._print(f"Failed to {action}: no account with user_id {raw_user_id.strip()}.")
        else:
            self._print(success)

    # ------------------------------------------------------------------
    # Stream helpers
    # ------------------------------------------------------------------
    def _read_line(self, prompt: str = "") -> str:
        self._stdout.write(prompt)
        self._stdout.flush()
        line = self._stdin.readline()
        if not line:
            raise EOFError
        return line.rstrip("\r\n")

    def _print(self, message: str = "") -> None:
        print(message, file=self._stdout)


__all__ = [
    "AdminConsole",
    "Command",
    "MENU_LINES",
    "SessionState",
    "parse_command",
]
