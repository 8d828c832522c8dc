"""Singularity container runtime installer.

This package provides functionality for:
- Detecting supported hosts (Debian, Ubuntu and derivatives)
- Choosing the APT build dependencies for the host release
- Fetching Go and a pinned Singularity release, compiling and installing it
- Keeping an idempotent PATH/completion block in a shell profile
"""
from .runner import CommandRunner
from .singularity import SingularityInstaller
from .system import (
    detect_distribution,
    require_supported_platform,
    ubuntu_major_version,
    system_packages,
    replace_profile_block,
)

__all__ = [
    'CommandRunner',
    'SingularityInstaller',
    'detect_distribution',
    'require_supported_platform',
    'ubuntu_major_version',
    'system_packages',
    'replace_profile_block',
]
