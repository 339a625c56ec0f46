"""
Greeter Module Provider

Binds a greeting service the rest of the application can resolve.
"""

import logging

from module_manager import ModuleProvider

logger = logging.getLogger(__name__)


class Greeter:
    """Builds greeting messages."""

    def __init__(self, greeting: str = "Hello"):
        self.greeting = greeting

    def greet(self, name: str) -> str:
        return f"{self.greeting}, {name}!"


class GreeterServiceProvider(ModuleProvider):
    """Registers the greeter service."""

    def register(self) -> None:
        self.app.bind("greeter", Greeter)

    def boot(self) -> None:
        logger.info(self.app.make("greeter").greet(self.module.get_name()))
