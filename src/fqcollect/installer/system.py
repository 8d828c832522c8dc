"""Host inspection and shell profile editing for the Singularity installer."""
import re
import logging
from pathlib import Path
from typing import List, Optional, Union

from ..errors import UnsupportedPlatform

logger = logging.getLogger(__name__)

SUPPORTED_DISTRIBUTIONS_RE = re.compile(r'debian|ubuntu')
DISTRIB_RELEASE_RE = re.compile(r'^DISTRIB_RELEASE.*=(\d+)\.', re.MULTILINE)

PROFILE_BLOCK_START = "# >>> singularity installer >>>"
PROFILE_BLOCK_END = "# <<< singularity installer <<<"
PROFILE_BLOCK_NOTE = "#these lines have been added by fqcollect install-singularity"

# Ubuntu releases before 18.04 ship the gpgme headers as libgpgme11-dev
LEGACY_GPGME_BEFORE = 18
BUILD_PACKAGES = [
    "build-essential", "uuid-dev", "uidmap", "squashfs-tools", "libseccomp-dev",
    "wget", "make", "pkg-config", "git", "cryptsetup-bin", "net-tools",
]


def detect_distribution(os_release: Union[str, Path] = "/etc/os-release") -> Optional[str]:
    """Return 'debian' or 'ubuntu' if the host is (based on) one of them.

    Both ID= and ID_LIKE= lines are considered, so derivatives such as Linux
    Mint report 'ubuntu'. Returns None for anything else or an unreadable file.
    """
    try:
        text = Path(os_release).read_text()
    except OSError as e:
        logger.warning(f"Could not read {os_release}: {e}")
        return None
    for line in text.splitlines():
        if not line.startswith("ID"):
            continue
        match = SUPPORTED_DISTRIBUTIONS_RE.search(line)
        if match:
            return match.group(0)
    return None


def require_supported_platform(os_release: Union[str, Path] = "/etc/os-release") -> str:
    """Like detect_distribution, but raise UnsupportedPlatform instead of returning None."""
    distribution = detect_distribution(os_release)
    if distribution is None:
        raise UnsupportedPlatform(
            "Unsupported OS type: this installer is designed only for Ubuntu or Debian Linux, exiting..."
        )
    return distribution


def ubuntu_major_version(lsb_release: Union[str, Path] = "/etc/lsb-release") -> Optional[int]:
    """Major release number from /etc/lsb-release, or None (e.g. on Debian)."""
    try:
        text = Path(lsb_release).read_text()
    except OSError:
        logger.debug(f"{lsb_release} not readable, release unknown")
        return None
    match = DISTRIB_RELEASE_RE.search(text)
    return int(match.group(1)) if match else None


def system_packages(ubuntu_major: Optional[int] = None) -> List[str]:
    """APT packages needed to build Singularity."""
    if ubuntu_major is not None and ubuntu_major < LEGACY_GPGME_BEFORE:
        gpgme = "libgpgme11-dev"
    else:
        gpgme = "libgpgme-dev"
    return [gpgme] + BUILD_PACKAGES


def strip_profile_block(text: str) -> str:
    """Remove every installer block (markers included) from profile text."""
    kept = []
    inside = False
    for line in text.splitlines(keepends=True):
        stripped = line.rstrip("\r\n")
        if not inside and stripped == PROFILE_BLOCK_START:
            inside = True
            continue
        if inside:
            if stripped == PROFILE_BLOCK_END:
                inside = False
            continue
        kept.append(line)
    return "".join(kept)


def replace_profile_block(text: str, body_lines: List[str]) -> str:
    """Strip any previous installer block and append a fresh one.

    Applying this twice with the same lines gives the same text as once.
    """
    text = strip_profile_block(text)
    if text and not text.endswith("\n"):
        text += "\n"
    block = [PROFILE_BLOCK_START, PROFILE_BLOCK_NOTE, *body_lines, PROFILE_BLOCK_END]
    return text + "\n".join(block) + "\n"
