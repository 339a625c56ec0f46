"""
Install/update processes for modules.
"""

from .installer import Installer
from .updater import Updater

__all__ = [
    'Installer',
    'Updater',
]
