"""
Greeter boot file.

Executed after the Greeter providers have booted; ``app`` and ``module``
are provided as globals.
"""

import logging

logger = logging.getLogger(__name__)

logger.info(f"Module {module.get_studly_name()} started")  # noqa: F821
