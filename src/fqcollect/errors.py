"""Exception taxonomy shared by the locator, the installer and the CLI."""


class FqcollectError(Exception):
    """Base class for all fqcollect errors"""


class InputNotFound(FqcollectError):
    """The sample list does not exist or is empty"""


class SearchRootNotFound(FqcollectError):
    """The directory to search is missing or not a directory"""


class OutputNotWritable(FqcollectError):
    """The output directory (or the sample list copy inside it) cannot be written"""


class UnsupportedPlatform(FqcollectError):
    """The installer was started on something other than Debian or Ubuntu"""


class InstallStepError(FqcollectError):
    """An external command run by the installer failed"""

    def __init__(self, command, returncode=None, detail=None):
        self.command = command
        self.returncode = returncode
        message = f"Command failed: {command}"
        if returncode is not None:
            message += f" (exit status {returncode})"
        if detail:
            message += f": {detail}"
        super().__init__(message)
