import logging
from typing import Callable, Optional

import click
import pyperclip

from commit_pilot.errors import (
    SETUP_HELP,
    ApiKeyMissingError,
    ConfigurationError,
    ErrorKind,
)
from commit_pilot.schemas import CompletionResult
from commit_pilot.settings import commit_pilot_logger

from .service import CommitPilotService


class CommitPilotController:
    """Main controller orchestrating the CLI workflow."""

    def __init__(
        self,
        commit_pilot_service: CommitPilotService,
        logger: Optional[logging.Logger] = None,
        clipboard_copy: Callable[[str], None] = pyperclip.copy,
        echo: Callable[..., None] = click.echo,
        echo_err: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._logger = logger or commit_pilot_logger(__name__)
        self._clipboard_copy = clipboard_copy
        self._echo = echo
        self._echo_err = echo_err or (lambda message: self._echo(message, err=True))
        self.commit_pilot_service = commit_pilot_service

    # --- Public API ---
    def run(self) -> int:
        self._logger.debug("Starting CLI controller run")
        diff = self.commit_pilot_service.read_diff()

        if not diff:
            self._logger.warning("No diff detected")
            self._echo_err("--- ❌ No changes detected. Add or modify files first. ---")
            return 1

        self._echo("🤖 Generating commit message...")
        try:
            result = self.commit_pilot_service.generate_commit(diff)
        except (ApiKeyMissingError, ConfigurationError) as e:
            self._echo_err(f"❌ {e}")
            self._echo_err(SETUP_HELP)
            return 1
        except Exception as e:
            self._logger.exception("Failed to generate commit message")
            self._echo_err(f"❌ An error occurred: {e}")
            return 1

        if result.is_err():
            self._report_error(result, diff)
            return 1

        if result.value is None:
            self._echo_err("❌ The model returned no commit message. Try again.")
            return 1

        self._display_commit(result.value)
        return 0

    # --- Private helpers ---
    def _report_error(self, result: CompletionResult, diff: str) -> None:
        if result.kind is ErrorKind.TOO_MUCH_TOKENS:
            self._echo_err(
                f"❌ Token limit exceeded. Try reducing the diff size of: {len(diff)}"
            )
            self._echo_err(result.error_message)
        elif result.kind is ErrorKind.AUTH_ERROR:
            self._echo_err(f"❌ Authentication failed: {result.error_message}")
            self._echo_err(SETUP_HELP)
        else:
            self._echo_err(f"❌ An error occurred: {result.error_message}")

    def _display_commit(self, commit_msg: str) -> None:
        self._logger.debug("Displaying commit message")
        self._echo(commit_msg)

        self._logger.debug("Copying commit message to clipboard")
        self._clipboard_copy(commit_msg)
        self._echo("\n✅ Suggested commit message copied to clipboard.\n")
