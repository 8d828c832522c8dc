"""Builds and installs Singularity from a pinned upstream release.

The heavy lifting is done by external programs (apt-get, wget, tar, make);
this module only decides what to run, in which order, and where. Git access
goes through GitPython.
"""
import os
import shutil
import tempfile
import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional

import git

from ..errors import InstallStepError
from .runner import CommandRunner
from .system import replace_profile_block, system_packages

logger = logging.getLogger(__name__)

SYSTEM_PROFILE = "/etc/profile"
SYSTEM_COMPLETION = "/usr/local/etc/bash_completion.d/singularity"
TEMP_DIR_PREFIX = "singularity_installer_"


def script_message(message: str) -> str:
    """Timestamped progress line in the installer's house style."""
    return f" *** [{datetime.now().strftime('%Y-%m-%d %H:%M:%S')}] script message: {message}"


class SingularityInstaller:
    """Installs Singularity per-user under a prefix, or system-wide"""

    def __init__(self, singularity_version: str, go_version: str, repo_url: str, go_url: str,
                 prefix: Optional[str] = None, ubuntu_major: Optional[int] = None,
                 runner: Optional[CommandRunner] = None,
                 announce: Optional[Callable[[str], None]] = None,
                 home: Optional[str] = None):
        self.singularity_version = singularity_version
        self.go_version = go_version
        self.repo_url = repo_url
        self.go_url = go_url
        self.prefix = prefix
        self.ubuntu_major = ubuntu_major
        self.runner = runner or CommandRunner()
        self._announce = announce
        self.home = Path(home) if home else Path.home()

    @property
    def dry_run(self) -> bool:
        return self.runner.dry_run

    @property
    def install_dir(self) -> Optional[str]:
        return os.path.join(self.prefix, "singularity") if self.prefix else None

    @property
    def profile_path(self) -> Path:
        return self.home / ".bashrc" if self.prefix else Path(SYSTEM_PROFILE)

    def announce(self, message: str) -> None:
        logger.info(message)
        if self._announce is not None:
            self._announce(script_message(message))

    def profile_lines(self) -> List[str]:
        """Body of the profile block for the chosen install mode."""
        if self.prefix:
            return [
                f"export PATH={self.install_dir}/bin:$PATH",
                f". {self.install_dir}/etc/bash_completion.d/singularity",
            ]
        return [f". {SYSTEM_COMPLETION}"]

    def build_env(self, work_dir: str) -> Dict[str, str]:
        """Environment for compiling: the downloaded Go toolchain first on PATH."""
        env = dict(os.environ)
        go_root = os.path.join(work_dir, "go")
        env["GOPATH"] = go_root
        env["PATH"] = os.path.join(go_root, "bin") + os.pathsep + env.get("PATH", "")
        return env

    # --- Steps ---

    def install_system_packages(self) -> None:
        self.announce("installing system requirements via APT...")
        packages = system_packages(self.ubuntu_major)
        if self.runner.succeeds(["dpkg", "-s", *packages]):
            self.announce("all requirements are already installed...")
            return
        logger.info("One or more system dependencies are not installed, will try to install...")
        self.runner.run(["apt-get", "update", "-qqy"], sudo=True)
        self.runner.run(["apt-get", "install", "-y", *packages], sudo=True)

    def make_work_dir(self) -> str:
        self.announce("creating temporary folder for downloads and build files...")
        if self.dry_run:
            return os.path.join(tempfile.gettempdir(), TEMP_DIR_PREFIX + "XXXXX")
        return tempfile.mkdtemp(prefix=TEMP_DIR_PREFIX)

    def download_go(self, work_dir: str) -> None:
        archive = self.go_url.rsplit("/", 1)[-1]
        self.announce(f"downloading go{self.go_version}...")
        self.runner.run(["wget", "-q", self.go_url], cwd=work_dir)
        self.announce("unpacking go...")
        self.runner.run(["tar", "-zxf", archive], cwd=work_dir)
        self.runner.run(["rm", "-f", archive], cwd=work_dir)

    def clone_source(self, work_dir: str) -> str:
        """Clone the Singularity repository and check out the pinned release."""
        source_dir = os.path.join(work_dir, "singularity")
        self.announce("downloading singularity...")
        if self.dry_run:
            logger.info(f"[dry-run] git clone {self.repo_url} {source_dir} && git checkout {self.singularity_version}")
            self.runner.history.append(f"git clone {self.repo_url} {source_dir}")
            self.runner.history.append(f"git checkout {self.singularity_version}")
            return source_dir
        try:
            repo = git.Repo.clone_from(self.repo_url, source_dir)
            repo.git.checkout(self.singularity_version)
        except git.GitCommandError as e:
            command = e.command if isinstance(e.command, str) else " ".join(str(a) for a in e.command)
            raise InstallStepError(command, e.status, str(e.stderr).strip()) from e
        logger.info(f"Checked out {self.singularity_version} in {source_dir}")
        return source_dir

    def compile_and_install(self, source_dir: str, env: Dict[str, str]) -> None:
        if self.prefix:
            self.announce(f"installing singularity into {self.install_dir}...")
            self.runner.run(["./mconfig", "--without-suid", f"--prefix={self.install_dir}"],
                            cwd=source_dir, env=env)
            self.runner.run(["make", "-j", "-C", "./builddir"], cwd=source_dir, env=env)
            self.runner.run(["make", "-j", "-C", "./builddir", "install"], cwd=source_dir, env=env)
        else:
            self.announce("installing singularity system-wide into /usr/local/bin...")
            self.runner.run(["./mconfig"], cwd=source_dir, env=env)
            # sudo resets PATH, so pass the Go toolchain explicitly
            sudo_env = ["env", f"PATH={env['PATH']}", f"GOPATH={env['GOPATH']}"]
            self.runner.run([*sudo_env, "make", "-j", "-C", "./builddir"], sudo=True, cwd=source_dir)
            self.runner.run([*sudo_env, "make", "-j", "-C", "./builddir", "install"], sudo=True, cwd=source_dir)

    def update_profile(self) -> None:
        """Rewrite the installer block in ~/.bashrc or /etc/profile."""
        path = self.profile_path
        if self.prefix:
            self.announce(f"Adding singularity path to $PATH and enabling bash auto-completion by adjusting {path}...")
        else:
            self.announce(f"enabling system-wide singularity bash auto-completion by adjusting {path}...")
        if self.dry_run:
            logger.info(f"[dry-run] would update installer block in {path}")
            return
        current = path.read_text() if path.exists() else ""
        updated = replace_profile_block(current, self.profile_lines())
        if self.prefix:
            path.write_text(updated)
        else:
            self.runner.run(["tee", str(path)], sudo=True, input_text=updated, quiet=True)

    def cleanup(self, work_dir: str) -> None:
        self.announce("Removing temporary folder and its contents...")
        if self.prefix:
            # Go module cache files are read-only
            self.runner.run(["chmod", "-R", "777", work_dir])
            if not self.dry_run:
                shutil.rmtree(work_dir)
        else:
            self.runner.run(["rm", "-rf", work_dir], sudo=True)

    def install(self) -> None:
        """Run every step in order. Any failure aborts the remaining steps."""
        self.install_system_packages()
        work_dir = self.make_work_dir()
        self.download_go(work_dir)
        env = self.build_env(work_dir)
        source_dir = self.clone_source(work_dir)
        self.compile_and_install(source_dir, env)
        self.update_profile()
        self.cleanup(work_dir)
        self.announce("Done installing. Reload the current shell to enable singularity command auto-completion right away.")
