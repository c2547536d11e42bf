import sys

import click

from commit_pilot.config import load_config
from commit_pilot.llm import ChatCommitPilot
from commit_pilot.settings import set_commit_pilot_log_level

from .controller import CommitPilotController
from .service import CommitPilotService


def _build_pilot() -> ChatCommitPilot:
    return ChatCommitPilot.from_config(load_config())


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--debug", is_flag=True, help="Enable debug logging")
def run_commit_pilot(debug: bool) -> None:
    """Generate a commit message from staged changes or a piped diff.

    \b
    Workflow:
      1. Without piped input, `git diff HEAD` and `git status --porcelain`
         are combined into the prompt.
      2. When diff text is piped to stdin, that input is used instead.
      3. The generated commit message is printed and copied to the clipboard.

    \b
    Environment (a .env file is read too):
      OPENAI_API_KEY                   API key (required)
      COMMIT_PILOT_PROVIDER            openai (default) or azure
      COMMIT_PILOT_BASE_PATH           custom service root
      COMMIT_PILOT_AZURE_API_VERSION   api-version for azure
      COMMIT_PILOT_MODEL               model or deployment name
      COMMIT_PILOT_TOKENS_MAX_INPUT    input token budget (default 4096)
      COMMIT_PILOT_TOKENS_MAX_OUTPUT   output token budget (default 500)
      COMMIT_PILOT_LOG_LEVEL           log level
    """
    if debug:
        set_commit_pilot_log_level("DEBUG")

    service = CommitPilotService(pilot_factory=_build_pilot)
    controller = CommitPilotController(service)

    sys.exit(controller.run())
