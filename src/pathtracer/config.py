"""Runtime configuration: Taichi backend selection and logging setup.

Taichi must be initialised before any module that declares fields
(pathtracer.scene.intersection, pathtracer.core.integrator) is imported.
Each process has its own runtime, so worker processes call init_taichi() too.

Example:
    >>> from pathtracer.config import RuntimeConfig, configure_logging, init_taichi
    >>> configure_logging("DEBUG")
    >>> init_taichi(RuntimeConfig(arch="gpu", random_seed=7))
    'cuda'
"""

import logging
import sys
from dataclasses import dataclass
from typing import Literal

import taichi as ti

logger = logging.getLogger(__name__)

Arch = Literal["cpu", "gpu"]

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class RuntimeConfig:
    """Settings passed to ti.init().

    Attributes:
        arch: "cpu", or "gpu" to try a GPU backend first.
        random_seed: Seed of Taichi's per-thread random generators.
        debug: Enables kernel asserts and bounds checks.
        log_level: Level name for configure_logging().
    """

    arch: Arch = "cpu"
    random_seed: int = 0
    debug: bool = False
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.arch not in ("cpu", "gpu"):
            raise ValueError(f"Unknown arch {self.arch!r}, expected 'cpu' or 'gpu'")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level {self.log_level!r}")


def init_taichi(config: RuntimeConfig) -> str:
    """Initialise the Taichi runtime for this process.

    With arch="gpu" Taichi picks an available GPU backend and drops to the CPU
    backend when none can start.

    Returns:
        The name of the backend in use, e.g. "cuda", "vulkan" or "x64".
    """
    if config.arch == "gpu":
        try:
            ti.init(arch=ti.gpu, random_seed=config.random_seed, debug=config.debug)
        except Exception as e:
            logger.warning("GPU backend unavailable (%s), falling back to CPU", e)
            ti.init(arch=ti.cpu, random_seed=config.random_seed, debug=config.debug)
    else:
        ti.init(arch=ti.cpu, random_seed=config.random_seed, debug=config.debug)

    backend = ti.lang.impl.current_cfg().arch.name
    logger.info("Using %s backend", backend)
    return backend


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger to write to stdout."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
