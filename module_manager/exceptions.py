"""
Module Manager Exceptions

Error types raised by the module registry and its lifecycle delegates.
"""

from typing import List, Optional


class ModuleError(Exception):
    """Base class for all module manager errors."""


class ModuleNotFound(ModuleError, LookupError):
    """
    Raised when no module matches a requested name.

    Anything that resolves a module by name goes through
    ModuleRepository.find_or_fail, so this is the single failure mode
    for "module does not exist".
    """

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Module [{name}] does not exist!")


class MalformedAssetSpecifier(ModuleError, ValueError):
    """Raised when an asset specifier is not in 'module:relative/path' form."""

    def __init__(self, asset: str):
        self.asset = asset
        super().__init__(
            f"Asset specifier '{asset}' is malformed, expected 'module:relative/path'"
        )


class ModuleLoadError(ModuleError):
    """Raised when a module's provider or boot file cannot be loaded."""


class ModuleMetadataError(ModuleError):
    """Raised when a module.json cannot be parsed into a JSON object."""


class ModuleRequirementError(ModuleError, ValueError):
    """Raised when a declared dependency constraint has no pip equivalent."""


class ModuleProcessError(ModuleError):
    """
    Raised when an install/update subprocess exits unsuccessfully.

    Attributes:
        command: The command line that was executed
        returncode: Exit status of the process (None if it never ran)
        output: Captured stderr (or stdout when stderr was empty)
    """

    def __init__(self, command: List[str], returncode: Optional[int], output: str = ""):
        self.command = command
        self.returncode = returncode
        self.output = output
        message = f"Command '{' '.join(command)}' failed"
        if returncode is not None:
            message += f" with exit status {returncode}"
        if output:
            message += f": {output}"
        super().__init__(message)
