"""
Module Management CLI

Command-line interface for managing modules.
Provides functionality to list modules, enable/disable them, pick the module
used by the current CLI session, and install or update modules.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv

from module_manager import (
    Filesystem,
    ModuleError,
    ModuleRepository,
    UrlGenerator,
    get_modules_config,
)


class ModuleManagerCLI:
    """Command-line interface for module management."""

    def __init__(self, path: Optional[str] = None):
        config = get_modules_config()
        self.repository = ModuleRepository(
            Filesystem(),
            config,
            url=UrlGenerator(config.app_url),
            path=path,
        )

    def list_modules(self):
        """List all modules."""
        modules = self.repository.all()

        if not modules:
            print(f"No modules found in {self.repository.get_path()}.")
            return

        print("\nModules:")
        print("-" * 60)
        print(f"{'Name':<24} {'Priority':<10} {'Enabled':<8} {'Active':<8}")
        print("-" * 60)

        for name, module in modules.items():
            print(f"{name:<24} {module.priority():<10} "
                  f"{'Yes' if module.enabled() else 'No':<8} "
                  f"{'Yes' if module.is_active() else 'No':<8}")

        print("-" * 60)

    def show_module_info(self, module_name: str):
        """Show detailed information about a module."""
        module = self.repository.find_or_fail(module_name)

        print(f"\nModule Information: {module.name}")
        print("=" * 50)
        print(f"Name: {module.name}")
        print(f"Description: {module.get('description', '')}")
        print(f"Version: {module.get('version', 'unknown')}")
        print(f"Path: {module.get_path()}")
        print(f"Priority: {module.priority()}")
        print(f"Enabled: {'Yes' if module.enabled() else 'No'}")
        print(f"Active: {'Yes' if module.is_active() else 'No'}")

        providers = module.get('providers', [])
        print(f"Providers: {', '.join(providers) if providers else 'None'}")

        requires = module.get('requires', {})
        print(f"Requires: {', '.join(requires) if requires else 'None'}")

    def enable_module(self, module_name: str):
        """Enable a module."""
        self.repository.enable(module_name)
        print(f"Module '{module_name}' enabled.")

    def disable_module(self, module_name: str):
        """Disable a module."""
        self.repository.disable(module_name)
        print(f"Module '{module_name}' disabled.")

    def show_order(self):
        """Show the order enabled modules register and boot in."""
        ordered = self.repository.get_ordered()

        if not ordered:
            print("No enabled modules.")
            return

        print("\nBoot Order:")
        for position, module in enumerate(ordered, start=1):
            print(f"{position:>3}. {module.name} (priority {module.priority()})")

    def use_module(self, module_name: str):
        """Mark a module as used for CLI sessions."""
        self.repository.set_used(module_name)
        print(f"Module '{self.repository.get_used().name}' used.")

    def show_used(self):
        """Show the module used for CLI sessions."""
        print(f"Using module: {self.repository.get_used_now().name}")

    def install_module(self, name: str, path: Optional[str], subtree: bool):
        """Install a module from its repository."""
        destination = self.repository.install(name, path, subtree)
        print(f"Module '{name}' installed into {destination}.")

    def update_module(self, module_name: str):
        """Install a module's dependencies."""
        installed = self.repository.update(module_name)
        if installed:
            print(f"Installed for '{module_name}': {', '.join(installed)}")
        else:
            print(f"Module '{module_name}' has no dependencies.")

    def run_lifecycle(self, boot: bool):
        """Register (and optionally boot) all enabled modules."""
        self.repository.register()
        print(f"Registered {len(self.repository.get_ordered())} modules.")
        if boot:
            self.repository.boot()
            print("Modules booted.")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(description="Module Manager")
    parser.add_argument('--path', help='Modules directory (overrides configuration)')
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # List command
    subparsers.add_parser('list', help='List all modules')

    # Info command
    info_parser = subparsers.add_parser('info', help='Show module information')
    info_parser.add_argument('module', help='Module name')

    # Enable command
    enable_parser = subparsers.add_parser('enable', help='Enable a module')
    enable_parser.add_argument('module', help='Module name')

    # Disable command
    disable_parser = subparsers.add_parser('disable', help='Disable a module')
    disable_parser.add_argument('module', help='Module name')

    # Order command
    subparsers.add_parser('order', help='Show the boot order of enabled modules')

    # Use command
    use_parser = subparsers.add_parser('use', help='Use a module for CLI sessions')
    use_parser.add_argument('module', help='Module name')

    # Used command
    subparsers.add_parser('used', help='Show the module used for CLI sessions')

    # Install command
    install_parser = subparsers.add_parser('install', help='Install a module')
    install_parser.add_argument('name', help='Repository name (vendor/package)')
    install_parser.add_argument('--into', dest='into', help='Install directory')
    install_parser.add_argument('--subtree', action='store_true', help='Install as a git subtree')

    # Update command
    update_parser = subparsers.add_parser('update', help="Install a module's dependencies")
    update_parser.add_argument('module', help='Module name')

    # Lifecycle commands
    subparsers.add_parser('register', help='Register all enabled modules')
    subparsers.add_parser('boot', help='Register and boot all enabled modules')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    cli = ModuleManagerCLI(args.path)

    # Execute command
    try:
        if args.command == 'list':
            cli.list_modules()
        elif args.command == 'info':
            cli.show_module_info(args.module)
        elif args.command == 'enable':
            cli.enable_module(args.module)
        elif args.command == 'disable':
            cli.disable_module(args.module)
        elif args.command == 'order':
            cli.show_order()
        elif args.command == 'use':
            cli.use_module(args.module)
        elif args.command == 'used':
            cli.show_used()
        elif args.command == 'install':
            cli.install_module(args.name, args.into, args.subtree)
        elif args.command == 'update':
            cli.update_module(args.module)
        elif args.command == 'register':
            cli.run_lifecycle(boot=False)
        elif args.command == 'boot':
            cli.run_lifecycle(boot=True)
    except ModuleError as e:
        print(f"Error: {e}")
        return 1

    return 0


def run():
    """Console script entry point."""
    load_dotenv()
    logging.basicConfig(
        level=getattr(logging, os.getenv('LOG_LEVEL', 'WARNING').upper(), logging.WARNING),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    sys.exit(main())


if __name__ == '__main__':
    run()
