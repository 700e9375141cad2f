"""Optional post-add hook running CI-style side effects out of band."""

from __future__ import annotations

import importlib
import os
import subprocess
import sys
from collections.abc import Callable
from pathlib import Path

from comptrack.config import CiConfig
from comptrack.logging import get_logger

logger = get_logger("ci")

DEFAULT_WORKER_MODULE = "comptrack.ci_worker"
ENV_COMPONENT_ID = "COMPTRACK_COMPONENT_ID"
ENV_DATA_DIR = "COMPTRACK_DATA_DIR"

CiFunction = Callable[[str, Path], object]


def default_worker_command() -> tuple[str, ...]:
    return (sys.executable, "-m", DEFAULT_WORKER_MODULE)


def spawn_detached_worker(component_id: str, data_dir: Path, command: tuple[str, ...]) -> None:
    """Start the worker process without waiting for it."""
    env = dict(os.environ)
    env[ENV_COMPONENT_ID] = component_id
    env[ENV_DATA_DIR] = str(data_dir)
    subprocess.Popen(
        list(command or default_worker_command()),
        env=env,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=True,
    )


def load_ci_function(reference: str) -> CiFunction:
    """Import a `module:callable` reference."""
    module_name, _, attribute = reference.partition(":")
    if not module_name or not attribute:
        raise ValueError(f"CI function must look like 'module:callable', got '{reference}'.")
    module = importlib.import_module(module_name)
    function = getattr(module, attribute)
    if not callable(function):
        raise ValueError(f"CI function '{reference}' is not callable.")
    return function


def run_post_add_hook(component_id: str, data_dir: Path, config: CiConfig) -> bool:
    """Trigger the configured hook for one component; return True when triggered.

    Hook failures are logged and never propagate.
    """
    if not config.enabled and not config.function:
        return False
    try:
        if config.function:
            load_ci_function(config.function)(component_id, data_dir)
        else:
            spawn_detached_worker(component_id, data_dir, config.command)
    except Exception as error:  # noqa: BLE001
        logger.warning("post-add hook failed for %s: %s", component_id, error)
        return False
    return True
