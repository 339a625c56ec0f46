"""
Module Installer

Fetches a module from its git repository into the modules root, either as a
plain clone or as a squashed git subtree of the host repository.
"""

import logging
import os
from typing import List, Optional, TYPE_CHECKING

from .command import Runner, run_command

if TYPE_CHECKING:
    from ..repository import ModuleRepository

logger = logging.getLogger(__name__)


class Installer:
    """
    Installs modules from remote repositories.

    Usage:
        installer = Installer(repository)
        installer.install("acme/blog")                  # git clone
        installer.install("acme/blog", subtree=True)    # git subtree add
    """

    def __init__(self, repository: 'ModuleRepository', runner: Optional[Runner] = None):
        self.repository = repository
        self.runner = runner

    def get_repo_url(self, name: str) -> str:
        """Get the repository URL for a vendor/package name."""
        return self.repository.config('repository').format(name=name)

    def get_destination_path(self, name: str, path: Optional[str] = None) -> str:
        """Get the directory the module is installed into."""
        if path:
            return path
        return self.repository.get_module_path(os.path.basename(name)).rstrip(os.sep)

    def get_command(self, name: str, path: Optional[str] = None, subtree: bool = False) -> List[str]:
        """Build the git command for an install."""
        url = self.get_repo_url(name)
        destination = self.get_destination_path(name, path)

        if subtree:
            branch = self.repository.config('branch')
            return ["git", "subtree", "add", f"--prefix={destination}", url, branch, "--squash"]

        return ["git", "clone", url, destination]

    def install(self, name: str, path: Optional[str] = None, subtree: bool = False) -> str:
        """
        Install a module.

        Args:
            name: Repository name in vendor/package form
            path: Target directory; defaults to the module path in the modules root
            subtree: Add the module as a git subtree instead of cloning it

        Returns:
            The directory the module was installed into

        Raises:
            ModuleProcessError: If git fails
        """
        destination = self.get_destination_path(name, path)
        logger.info(f"Installing module '{name}' into {destination}...")

        output = run_command(self.get_command(name, path, subtree), self.runner)
        if output:
            logger.debug(output[:500])

        logger.info(f"Installed module '{name}'")
        return destination
