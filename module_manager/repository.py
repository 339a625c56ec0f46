"""
Module Repository

Discovers modules under the configured modules root, filters and orders
them, and drives their register/boot lifecycle.

The repository keeps no module state between calls: every operation
re-scans the modules root, so the result always reflects what is on disk.
Status files and the active-module marker are written wholesale without
cross-process locking, so one writer (e.g. one CLI session) at a time is
assumed.
"""

import logging
import os
from typing import Any, Dict, List, Optional

from .config import ModulesConfig
from .exceptions import MalformedAssetSpecifier, ModuleNotFound
from .filesystem import Filesystem
from .module import Module, studly
from .process.command import Runner
from .process.installer import Installer
from .process.updater import Updater
from .url import UrlGenerator

logger = logging.getLogger(__name__)

USED_MARKER_DIR = "meta"
USED_MARKER_FILE = "modules.used"


def discover_all(files: Filesystem, root: str, app: Any = None) -> Dict[str, Module]:
    """
    Discover modules in the given root directory.

    Args:
        files: Filesystem provider
        root: Directory whose immediate subdirectories are modules
        app: Host application handed to each module

    Returns:
        Dict of directory basename -> Module. Empty if the root does not
        exist or is not a directory.
    """
    modules: Dict[str, Module] = {}

    if not files.is_directory(root):
        return modules

    for directory in files.directories(root):
        name = os.path.basename(os.path.normpath(directory))
        # Hidden directories (.git, .cache, ...) are never modules
        if name.startswith('.'):
            continue
        modules[name] = Module(app, name, os.path.abspath(directory), files)

    return modules


class ModuleRepository:
    """
    Registry for modules discovered on disk.

    Handles discovery, status filtering, lookup, priority ordering, the
    register/boot lifecycle, the active-module marker for CLI sessions,
    and asset path helpers.
    """

    def __init__(self,
                 files: Filesystem,
                 config: ModulesConfig,
                 app: Any = None,
                 url: Optional[UrlGenerator] = None,
                 path: Optional[str] = None,
                 runner: Optional[Runner] = None):
        self.files = files
        self.settings = config
        self.app = app
        self.url = url or UrlGenerator(config.get('modules.paths.url', 'http://localhost'))
        self.path = path
        self.runner = runner

    def __len__(self) -> int:
        return self.count()

    def all(self) -> Dict[str, Module]:
        """Get all modules, keyed by directory name."""
        return discover_all(self.files, self.get_path(), self.app)

    def get_by_status(self, status: bool) -> Dict[str, Module]:
        """Get modules whose persisted status equals the given one."""
        return {
            name: module for name, module in self.all().items()
            if module.is_status(status)
        }

    def enabled(self) -> Dict[str, Module]:
        """Get all enabled modules."""
        return self.get_by_status(True)

    def disabled(self) -> Dict[str, Module]:
        """Get all disabled modules."""
        return self.get_by_status(False)

    def has(self, name: str) -> bool:
        """Determine whether a module directory with exactly this name exists."""
        return name in self.all()

    def count(self) -> int:
        """Get the number of modules."""
        return len(self.all())

    def collections(self) -> List[Module]:
        """Get the enabled modules as a list."""
        return list(self.enabled().values())

    def get_ordered(self) -> List[Module]:
        """
        Get enabled modules ordered by priority, highest first.

        Modules with equal priority keep their discovery order.
        """
        return sorted(self.enabled().values(), key=lambda module: module.priority(), reverse=True)

    def get_path(self) -> str:
        """Get the modules root: the explicit override, else the configured path."""
        return self.path or self.config('modules')

    def register(self) -> None:
        """
        Run the register hook of every enabled module in priority order.

        A failing hook propagates immediately; later modules are not registered.
        """
        modules = self.get_ordered()
        logger.info(f"Registering {len(modules)} modules...")
        for module in modules:
            module.register()
        logger.info("Modules registered")

    def boot(self) -> None:
        """
        Run the boot hook of every enabled module in priority order.

        Call only after register() has completed for the whole set.
        """
        modules = self.get_ordered()
        logger.info(f"Booting {len(modules)} modules...")
        for module in modules:
            module.boot()
        logger.info("Modules booted")

    def find(self, name: str) -> Optional[Module]:
        """Find a module by name, ignoring case."""
        lower_name = name.lower()
        for module in self.all().values():
            if module.get_lower_name() == lower_name:
                return module
        return None

    def get(self, name: str) -> Optional[Module]:
        """Alias of find()."""
        return self.find(name)

    def find_or_fail(self, name: str) -> Module:
        """
        Find a module by name, ignoring case.

        Raises:
            ModuleNotFound: If no module matches
        """
        module = self.find(name)
        if module is None:
            raise ModuleNotFound(name)
        return module

    def get_module_path(self, name: str) -> str:
        """Get the directory a module with the given name lives (or would live) in."""
        return os.path.join(self.get_path(), studly(name), '')

    def assets_path(self, name: str) -> str:
        """Get the published asset directory of a module."""
        return f"{self.get_assets_path()}/{name}"

    def config(self, key: str) -> Any:
        """Get a value from the modules.paths configuration namespace."""
        return self.settings.get(f"modules.paths.{key}")

    def get_used_storage_path(self) -> str:
        """
        Get the path of the active-module marker file.

        Creates the marker directory if it does not exist yet.
        """
        path = os.path.join(self.config('storage'), USED_MARKER_DIR)
        if not self.files.exists(path):
            self.files.make_directory(path, 0o777, True)
        return os.path.join(path, USED_MARKER_FILE)

    def set_used(self, name: str) -> None:
        """
        Mark a module as the one used by CLI sessions.

        Raises:
            ModuleNotFound: If the module does not exist
        """
        module = self.find_or_fail(name)
        self.files.put(self.get_used_storage_path(), module.identifier())
        logger.info(f"Module '{module.name}' is now used")

    def get_used_now(self) -> Module:
        """
        Get the module marked as used.

        The stored name is resolved again on every call, so a marker that
        points at a removed module raises instead of returning stale data.

        Raises:
            ModuleNotFound: If no module is marked or the marked one is gone
        """
        path = self.get_used_storage_path()
        name = self.files.get(path).strip() if self.files.exists(path) else ""
        return self.find_or_fail(name)

    def get_used(self) -> Module:
        """Alias of get_used_now()."""
        return self.get_used_now()

    def get_files(self) -> Filesystem:
        """Get the filesystem provider."""
        return self.files

    def get_assets_path(self) -> str:
        """Get the root directory module assets are published to."""
        return self.config('assets')

    def asset(self, asset: str, secure: bool = False) -> str:
        """
        Get the URL of a module asset.

        Args:
            asset: Specifier in 'module:relative/path' form
            secure: Force the https scheme

        Raises:
            MalformedAssetSpecifier: If the specifier has no ':' separator
        """
        if ':' not in asset:
            raise MalformedAssetSpecifier(asset)

        name, url = asset.split(':', 1)
        base = os.path.basename(os.path.normpath(self.get_assets_path()))
        return self.url.asset(f"{base}/{name}/{url}", secure)

    def active(self, name: str) -> bool:
        """Determine whether the given module is activated."""
        return self.find_or_fail(name).is_active()

    def not_active(self, name: str) -> bool:
        """Determine whether the given module is not activated."""
        return not self.active(name)

    def enable(self, name: str) -> bool:
        """Enable a module."""
        return self.find_or_fail(name).enable()

    def disable(self, name: str) -> bool:
        """Disable a module."""
        return self.find_or_fail(name).disable()

    def update(self, name: str) -> List[str]:
        """Install the dependencies declared by a module."""
        return Updater(self, self.runner).update(name)

    def install(self, name: str, path: Optional[str] = None, subtree: bool = False) -> str:
        """Install a module from its repository."""
        return Installer(self, self.runner).install(name, path, subtree)
