"""
Subprocess helper shared by the module installer and updater.
"""

import logging
import subprocess
from typing import Callable, List, Optional

from ..exceptions import ModuleProcessError

logger = logging.getLogger(__name__)

# Signature-compatible with subprocess.run; tests inject a fake
Runner = Callable[..., subprocess.CompletedProcess]


def run_command(command: List[str],
                runner: Optional[Runner] = None,
                cwd: Optional[str] = None,
                timeout: float = 600) -> str:
    """
    Run a command and return its stdout.

    Args:
        command: Command line as a list of arguments
        runner: Replacement for subprocess.run
        cwd: Working directory
        timeout: Seconds before the command is abandoned

    Returns:
        Captured stdout, stripped

    Raises:
        ModuleProcessError: If the command cannot run, times out or exits non-zero
    """
    runner = runner or subprocess.run
    logger.debug(f"Running: {' '.join(command)}")

    try:
        result = runner(command, capture_output=True, text=True, cwd=cwd, timeout=timeout)
    except subprocess.TimeoutExpired:
        raise ModuleProcessError(command, None, "timed out")
    except (subprocess.SubprocessError, OSError) as e:
        raise ModuleProcessError(command, None, str(e)) from e

    if result.returncode != 0:
        output = (result.stderr or result.stdout or "").strip()
        raise ModuleProcessError(command, result.returncode, output)

    return (result.stdout or "").strip()
