"""
Shared helpers for module system tests.

Builds module trees on disk and repositories pointing at them.
"""

import json
import sys
from pathlib import Path
from typing import Any, List, Optional, Tuple

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from module_manager import Filesystem, ModuleRepository, ModulesConfig, UrlGenerator


# Provider that records lifecycle calls on the host application
RECORDING_PROVIDER = '''
from module_manager import ModuleProvider


class RecordingProvider(ModuleProvider):
    def register(self):
        self.app.calls.append(("register", self.module.get_name()))

    def boot(self):
        self.app.calls.append(("boot", self.module.get_name()))
'''

# Provider whose register hook always fails
FAILING_PROVIDER = '''
from module_manager import ModuleProvider


class FailingProvider(ModuleProvider):
    def register(self):
        self.app.calls.append(("register", self.module.get_name()))
        raise RuntimeError("register failed for " + self.module.get_name())
'''


class RecordingApp:
    """Host application stand-in that records lifecycle calls."""

    def __init__(self):
        self.calls: List[Tuple[str, str]] = []

    def phases(self) -> List[str]:
        return [phase for phase, _ in self.calls]

    def names(self, phase: str) -> List[str]:
        return [name for call_phase, name in self.calls if call_phase == phase]


def make_module(root: Path, name: str, provider_source: Optional[str] = None,
                **metadata: Any) -> Path:
    """
    Create a module directory with a module.json.

    Args:
        root: Modules root
        name: Directory name
        provider_source: Optional provider code written to provider.py and
                         listed in the module's providers
        **metadata: module.json contents
    """
    module_dir = root / name
    module_dir.mkdir(parents=True, exist_ok=True)

    if provider_source is not None:
        (module_dir / "provider.py").write_text(provider_source, encoding="utf-8")
        metadata.setdefault("providers", ["provider.py"])

    (module_dir / "module.json").write_text(json.dumps(metadata, indent=4), encoding="utf-8")
    return module_dir


def make_repository(base: Path, app: Any = None, runner: Any = None,
                    **overrides: Any) -> ModuleRepository:
    """
    Create a repository rooted at base/modules with storage at base/storage.

    Keyword overrides are passed to ModulesConfig; runner replaces
    subprocess.run for installs and updates.
    """
    settings = {
        "modules_path": str(base / "modules"),
        "assets_path": str(base / "public" / "modules"),
        "storage_path": str(base / "storage"),
        "app_url": "http://example.test",
    }
    settings.update(overrides)
    config = ModulesConfig(**settings)
    return ModuleRepository(Filesystem(), config, app=app, url=UrlGenerator(config.app_url), runner=runner)
