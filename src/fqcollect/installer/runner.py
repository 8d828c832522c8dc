import shlex
import subprocess
import logging
from typing import Dict, List, Optional

from ..errors import InstallStepError

logger = logging.getLogger(__name__)


class CommandRunner:
    """Runs external commands one at a time, failing fast.

    In dry-run mode commands are only recorded (and logged), never executed.
    Every command, executed or not, is appended to `history`.
    """

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run
        self.history: List[str] = []

    @staticmethod
    def format_command(args: List[str], sudo: bool = False) -> str:
        return shlex.join(["sudo", *args] if sudo else list(args))

    def run(self, args: List[str], sudo: bool = False, cwd: Optional[str] = None,
            env: Optional[Dict[str, str]] = None, input_text: Optional[str] = None,
            quiet: bool = False) -> None:
        """Run a command and raise InstallStepError if it exits non-zero.

        Args:
            args: program and arguments
            sudo: prefix the command with sudo
            cwd: working directory
            env: full environment for the child process (None inherits ours)
            input_text: text fed to the command's stdin
            quiet: discard the command's stdout
        """
        command = self.format_command(args, sudo)
        self.history.append(command)
        if self.dry_run:
            logger.info(f"[dry-run] {command}")
            return
        logger.info(f"Running: {command}")
        full_args = ["sudo", *args] if sudo else list(args)
        try:
            subprocess.run(
                full_args,
                cwd=cwd,
                env=env,
                input=input_text,
                text=True,
                stdout=subprocess.DEVNULL if quiet else None,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            raise InstallStepError(command, e.returncode) from e
        except FileNotFoundError as e:
            raise InstallStepError(command, detail=f"program not found: {args[0]}") from e

    def succeeds(self, args: List[str]) -> bool:
        """Run a probe command silently and report whether it exited 0.

        Probes are not recorded in history. In dry-run mode they report False.
        """
        if self.dry_run:
            return False
        try:
            result = subprocess.run(args, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
        except FileNotFoundError:
            return False
        return result.returncode == 0
