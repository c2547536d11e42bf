import asyncio
import logging
import subprocess
import sys
from typing import Callable, Optional, Sequence, TextIO

from commit_pilot.llm import ChatCommitPilot
from commit_pilot.schemas import CompletionResult
from commit_pilot.settings import commit_pilot_logger


class CommitPilotService:
    def __init__(
        self,
        pilot_factory: Callable[[], ChatCommitPilot],
        logger: Optional[logging.Logger] = None,
        stdin: TextIO = sys.stdin,
        run_process: Optional[
            Callable[[Sequence[str]], subprocess.CompletedProcess[str]]
        ] = None,
        isatty: Optional[Callable[[], bool]] = None,
    ) -> None:
        self._logger = logger or commit_pilot_logger(__name__)
        self._stdin = stdin
        self._isatty = isatty or stdin.isatty
        self._run_process = run_process or self._default_run_process
        self._pilot_factory = pilot_factory

    # --- Public API ---
    def read_diff(self) -> str:
        self._logger.debug("Collecting diff...")

        if not self._isatty():
            self._logger.debug("Reading diff from stdin...")
            return self._stdin.read().strip()

        diff_output = self._run_git_command(["git", "diff", "HEAD"])
        status_output = self._run_git_command(["git", "status", "--porcelain"])

        combined = "\n".join(part for part in [diff_output, status_output] if part)

        self._logger.debug("Combined diff length: %d", len(combined))

        return combined

    def generate_commit(self, diff: str) -> CompletionResult:
        """Run one completion for *diff*.

        Startup errors raised while building the pilot (missing API key,
        invalid settings) propagate; generation failures come back as an
        error result.
        """
        messages = ChatCommitPilot.build_messages(diff)
        return asyncio.run(self._complete(messages))

    # --- Private helpers ---
    async def _complete(self, messages) -> CompletionResult:
        async with self._pilot_factory() as pilot:
            self._logger.debug("Invoking %s", pilot)
            result = await pilot.complete(messages)
            self._logger.debug("Invocation finished: %r", result)
            return result

    def _run_git_command(self, args: Sequence[str]) -> str:
        self._logger.debug("Running git command: %s", " ".join(args))
        result = self._run_process(args)
        if result.returncode != 0:
            self._logger.debug(
                "Command returned non-zero exit code %s: %s",
                result.returncode,
                (result.stderr or "").strip(),
            )
        # porcelain status lines start with a significant space
        stdout = result.stdout.rstrip("\n")
        self._logger.debug("Git output length: %d", len(stdout))
        return stdout

    # --- Static helpers ---
    @staticmethod
    def _default_run_process(
        args: Sequence[str],
    ) -> subprocess.CompletedProcess[str]:
        return subprocess.run(args, capture_output=True, text=True, check=False)
