"""
Modular Application

Main application that discovers the modules on disk and starts every enabled
one in two phases: all modules register, then all modules boot.
"""

import logging
import os
from typing import Any, Callable, Dict

from dotenv import load_dotenv

from module_manager import Filesystem, ModuleRepository, UrlGenerator, get_modules_config

# Setup logging
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()


class Application:
    """
    Host application handed to module providers.

    Providers bind services during the register phase and resolve them
    during the boot phase.
    """

    def __init__(self):
        self._factories: Dict[str, Callable[[], Any]] = {}
        self._instances: Dict[str, Any] = {}

        config = get_modules_config()
        self.modules = ModuleRepository(
            Filesystem(),
            config,
            app=self,
            url=UrlGenerator(config.app_url),
        )

    def bind(self, name: str, factory: Callable[[], Any]) -> None:
        """Register a service factory; the service is created on first use."""
        self._factories[name] = factory
        self._instances.pop(name, None)

    def make(self, name: str) -> Any:
        """Resolve a service."""
        if name not in self._instances:
            if name not in self._factories:
                raise KeyError(f"Service '{name}' is not bound")
            self._instances[name] = self._factories[name]()
        return self._instances[name]

    def bound(self, name: str) -> bool:
        """Determine whether a service has been bound."""
        return name in self._factories

    def start(self) -> None:
        """Register, then boot, every enabled module."""
        logger.info("Starting Modular Application...")
        logger.info(f"Modules path: {self.modules.get_path()}")

        ordered = [module.name for module in self.modules.get_ordered()]
        logger.info(f"Module order: {ordered}")

        self.modules.register()
        self.modules.boot()

        logger.info("Application started successfully")


def main():
    """Main application entry point."""
    app = Application()
    try:
        app.start()
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        raise


if __name__ == '__main__':
    main()
