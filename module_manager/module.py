"""
Module Descriptor

Defines the Module class representing one module directory on disk, and the
ModuleProvider base class modules implement to hook into the host
application's register/boot lifecycle.

Each module directory carries a ``module.json`` metadata file:

    {
        "name": "Blog",
        "description": "Blog posts and comments",
        "priority": 10,
        "status": true,
        "active": true,
        "providers": ["providers.py:BlogServiceProvider"],
        "files": ["start.py"],
        "requires": {"markdown": ">=3.0"}
    }
"""

import importlib.util
import json
import logging
import os
import re
from pathlib import Path
from types import ModuleType
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from .exceptions import ModuleLoadError, ModuleMetadataError

if TYPE_CHECKING:
    from .filesystem import Filesystem

logger = logging.getLogger(__name__)

METADATA_FILE = "module.json"

_TRUE_STRINGS = {"1", "on", "true", "yes", "enabled"}


def studly(value: str) -> str:
    """Convert 'blog-posts' / 'blog_posts' / 'blog posts' to 'BlogPosts'."""
    words = re.split(r'[-_\s]+', value)
    return ''.join(word[:1].upper() + word[1:] for word in words if word)


def to_bool(value: Any) -> bool:
    """
    Coerce a persisted status value to bool.

    Older metadata stores status as 0/1 integers or "on"/"off" strings.
    """
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


class ModuleProvider:
    """
    Base class for module service providers.

    Modules list their providers in module.json; the registry instantiates
    each one with the host application and the owning Module, then calls
    register() on every enabled module before calling boot() on any of them.
    """

    def __init__(self, app: Any, module: 'Module'):
        self.app = app
        self.module = module

    def register(self) -> None:
        """Called during the register phase, before any module boots."""
        pass

    def boot(self) -> None:
        """Called during the boot phase, after every module has registered."""
        pass


class Module:
    """
    A module discovered under the modules root.

    Descriptors are cheap and hold no cached state about status or priority:
    every accessor re-reads module.json, so a change made by another process
    is visible immediately.
    """

    def __init__(self, app: Any, name: str, path: str, files: 'Filesystem'):
        self.app = app
        self.name = name
        self.path = path
        self.files = files
        self._providers: Optional[List[ModuleProvider]] = None

    def __repr__(self) -> str:
        return f"Module(name={self.name!r}, path={self.path!r})"

    def __str__(self) -> str:
        return self.name

    # Naming
    def get_name(self) -> str:
        """Get the module name as it appears on disk."""
        return self.name

    def identifier(self) -> str:
        """Get the identifier used to persist references to this module."""
        return self.name

    def get_lower_name(self) -> str:
        """Get the lowercase module name used for lookups."""
        return self.name.lower()

    def get_studly_name(self) -> str:
        """Get the StudlyCase module name."""
        return studly(self.name)

    # Paths
    def get_path(self) -> str:
        """Get the module's root directory."""
        return self.path

    def get_extra_path(self, path: str) -> str:
        """Get a path inside the module directory."""
        return os.path.join(self.path, path)

    def get_metadata_path(self) -> str:
        """Get the path of this module's module.json."""
        return self.get_extra_path(METADATA_FILE)

    # Metadata
    def json(self) -> Dict[str, Any]:
        """
        Read the module's metadata.

        A missing file yields empty metadata. A corrupt file is logged and
        also treated as empty, so one broken module cannot break discovery.
        """
        try:
            return self._read_metadata()
        except ModuleMetadataError as e:
            logger.warning(f"Failed to read metadata for module '{self.name}': {e}")
            return {}

    def _read_metadata(self) -> Dict[str, Any]:
        """
        Read module.json, raising on anything but a JSON object.

        Raises:
            ModuleMetadataError: If the file cannot be read or parsed
        """
        metadata_path = self.get_metadata_path()
        if not self.files.exists(metadata_path):
            return {}

        try:
            data = json.loads(self.files.get(metadata_path))
        except (OSError, ValueError) as e:
            raise ModuleMetadataError(f"{metadata_path}: {e}") from e

        if not isinstance(data, dict):
            raise ModuleMetadataError(f"{metadata_path}: not a JSON object")
        return data

    def get(self, key: str, default: Any = None) -> Any:
        """Get a single metadata value."""
        return self.json().get(key, default)

    def priority(self) -> int:
        """Get the module priority; higher priorities register and boot first."""
        value = self.get('priority', 0)
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning(f"Module '{self.name}' has a non-integer priority: {value!r}")
            return 0

    # Status
    def status(self) -> bool:
        """Get the persisted enabled/disabled status."""
        return to_bool(self.get('status', False))

    def is_status(self, status: Any) -> bool:
        """Determine whether the module's status equals the given one."""
        return self.status() == to_bool(status)

    def enabled(self) -> bool:
        """Determine whether the module is enabled."""
        return self.is_status(True)

    def disabled(self) -> bool:
        """Determine whether the module is disabled."""
        return not self.enabled()

    def set_status(self, status: bool) -> bool:
        """
        Persist the module status.

        The whole metadata file is rewritten with the new value. A file that
        cannot be parsed is left untouched.

        Returns:
            True once the status has been written

        Raises:
            ModuleMetadataError: If the existing module.json is corrupt
        """
        data = self._read_metadata()
        data['status'] = bool(status)
        self.files.put(self.get_metadata_path(), json.dumps(data, indent=4) + "\n")
        logger.info(f"Module '{self.name}' {'enabled' if status else 'disabled'}")
        return True

    def enable(self) -> bool:
        """Enable the module."""
        return self.set_status(True)

    def disable(self) -> bool:
        """Disable the module."""
        return self.set_status(False)

    # Activation
    def is_active(self) -> bool:
        """
        Determine whether the module is activated.

        Activation is a separate metadata flag from status; modules are
        active unless their metadata says otherwise.
        """
        return to_bool(self.get('active', True))

    def active(self) -> bool:
        """Alias of is_active()."""
        return self.is_active()

    # Lifecycle
    def get_providers(self) -> List[ModuleProvider]:
        """Load (once per descriptor) and return the module's providers."""
        if self._providers is None:
            self._providers = [
                self._load_provider(entry) for entry in self.get('providers', [])
            ]
        return self._providers

    def register(self) -> None:
        """Run the register hook of every provider."""
        for provider in self.get_providers():
            provider.register()
        logger.debug(f"Registered module: {self.name}")

    def boot(self) -> None:
        """Run the boot hook of every provider, then the module's boot files."""
        for provider in self.get_providers():
            provider.boot()

        for file_name in self.get('files', []):
            self._load_file(file_name)

        logger.debug(f"Booted module: {self.name}")

    # Private methods
    def _load_source(self, relative_path: str) -> ModuleType:
        """Execute a Python file from the module directory and return it."""
        file_path = Path(self.get_extra_path(relative_path))
        if not file_path.is_file():
            raise ModuleLoadError(f"Module '{self.name}' file not found: {file_path}")

        module_name = f"modules.{self.get_lower_name()}.{file_path.stem}"
        try:
            spec = importlib.util.spec_from_file_location(module_name, file_path)
            if spec is None or spec.loader is None:
                raise ModuleLoadError(f"Cannot load {file_path} for module '{self.name}'")

            source = importlib.util.module_from_spec(spec)
            # Boot files see the host application and their module as globals
            source.app = self.app
            source.module = self
            spec.loader.exec_module(source)
        except ModuleLoadError:
            raise
        except Exception as e:
            raise ModuleLoadError(f"Failed to load {file_path} for module '{self.name}': {e}") from e

        return source

    def _load_provider(self, entry: str) -> ModuleProvider:
        """Instantiate a provider from a 'file.py' or 'file.py:ClassName' entry."""
        relative_path, _, class_name = entry.partition(':')
        source = self._load_source(relative_path)

        if class_name:
            provider_class = getattr(source, class_name, None)
        else:
            # Look for the first ModuleProvider subclass
            provider_class = None
            for attr_name in dir(source):
                attr = getattr(source, attr_name)
                if (isinstance(attr, type) and
                    issubclass(attr, ModuleProvider) and
                    attr is not ModuleProvider):
                    provider_class = attr
                    break

        if not (isinstance(provider_class, type) and issubclass(provider_class, ModuleProvider)):
            raise ModuleLoadError(f"No ModuleProvider found for '{entry}' in module '{self.name}'")

        logger.debug(f"Loaded provider {provider_class.__name__} for module: {self.name}")
        return provider_class(self.app, self)

    def _load_file(self, relative_path: str) -> None:
        """Execute a boot file."""
        self._load_source(relative_path)
        logger.debug(f"Loaded file {relative_path} for module: {self.name}")
