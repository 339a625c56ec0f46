"""
Module Manager System

This package discovers self-contained modules in a directory tree, tracks
whether each one is enabled, orders them by priority and drives their
register/boot lifecycle for a host application.
"""

from .config import ModulesConfig, get_modules_config
from .exceptions import (
    MalformedAssetSpecifier,
    ModuleError,
    ModuleLoadError,
    ModuleMetadataError,
    ModuleNotFound,
    ModuleProcessError,
    ModuleRequirementError,
)
from .filesystem import Filesystem
from .module import Module, ModuleProvider
from .repository import ModuleRepository, discover_all
from .url import UrlGenerator

__all__ = [
    'Module',
    'ModuleProvider',
    'ModuleRepository',
    'discover_all',
    'Filesystem',
    'ModulesConfig',
    'get_modules_config',
    'UrlGenerator',
    'ModuleError',
    'ModuleNotFound',
    'MalformedAssetSpecifier',
    'ModuleLoadError',
    'ModuleMetadataError',
    'ModuleProcessError',
    'ModuleRequirementError',
]

__version__ = "1.0.0"
