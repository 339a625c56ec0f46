"""
Module Updater

Installs the Python packages a module declares under "requires" in its
module.json, e.g.

    "requires": {"markdown": ">=3.0", "bleach": "*"}
"""

import logging
import sys
from typing import Any, List, Optional, TYPE_CHECKING

from ..exceptions import ModuleRequirementError
from .command import Runner, run_command

if TYPE_CHECKING:
    from ..repository import ModuleRepository

logger = logging.getLogger(__name__)


PIP_OPERATORS = ("===", "==", "!=", "<=", ">=", "~=", "<", ">")


def _version_parts(version: str) -> List[str]:
    """Split a dotted numeric version, rejecting anything else."""
    parts = version.split('.')
    if not all(part.isdigit() for part in parts):
        raise ModuleRequirementError(f"Invalid version in constraint: {version!r}")
    return parts


def _caret_upper_bound(version: str) -> str:
    """Get the exclusive upper bound of a caret constraint: ^1.2 -> 2, ^0.3.1 -> 0.4."""
    parts = _version_parts(version)
    position = next((i for i, part in enumerate(parts) if int(part) != 0), len(parts) - 1)
    bound = parts[:position] + [str(int(parts[position]) + 1)]
    return '.'.join(bound)


def format_requirement(package: str, version: Any) -> str:
    """
    Turn a package/version pair into a pip requirement string.

    Bare versions pin exactly. Composer-style ``~1.2`` becomes ``~=1.2`` and
    ``^1.2`` becomes ``>=1.2,<2``.

    Raises:
        ModuleRequirementError: If the constraint has no pip equivalent
    """
    version = str(version or "").strip()
    if not version or version == "*":
        return package
    if version[0].isdigit():
        return f"{package}=={version}"
    if version.startswith(PIP_OPERATORS):
        return f"{package}{version}"
    if version.startswith('~'):
        base = version[1:].strip()
        if len(_version_parts(base)) == 1:
            # ~= needs at least two components
            return f"{package}>={base},<{int(base) + 1}"
        return f"{package}~={base}"
    if version.startswith('^'):
        base = version[1:].strip()
        return f"{package}>={base},<{_caret_upper_bound(base)}"
    raise ModuleRequirementError(f"Unsupported version constraint for '{package}': {version}")


class Updater:
    """Installs the dependencies declared by a module."""

    def __init__(self, repository: 'ModuleRepository', runner: Optional[Runner] = None):
        self.repository = repository
        self.runner = runner

    def get_requirements(self, name: str) -> List[str]:
        """
        Get the pip requirement strings declared by a module.

        Raises:
            ModuleNotFound: If the module does not exist
            ModuleRequirementError: If a constraint cannot be translated
        """
        requires = self.repository.find_or_fail(name).get('requires', {}) or {}
        if isinstance(requires, dict):
            return [format_requirement(package, version) for package, version in requires.items()]
        return [str(requirement) for requirement in requires]

    def update(self, name: str) -> List[str]:
        """
        Install a module's declared dependencies, one requirement at a time.

        Returns:
            The requirements that were installed

        Raises:
            ModuleNotFound: If the module does not exist
            ModuleProcessError: If pip fails
        """
        requirements = self.get_requirements(name)
        if not requirements:
            logger.info(f"Module '{name}' declares no dependencies")
            return []

        for requirement in requirements:
            logger.info(f"Installing '{requirement}' for module '{name}'...")
            run_command([sys.executable, "-m", "pip", "install", requirement], self.runner)

        logger.info(f"Updated {len(requirements)} dependencies for module '{name}'")
        return requirements
