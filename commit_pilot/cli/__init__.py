from .controller import CommitPilotController
from .main import run_commit_pilot
from .service import CommitPilotService

__all__ = ["CommitPilotController", "CommitPilotService", "run_commit_pilot"]
