"""Render the animated box scene to PNG frames.

Each frame is written as <output-dir>/<frame>.png. With --workers > 1 frames
are rendered in separate processes, each running its own Taichi runtime.

Usage:
    pathtracer [options]
    python -m pathtracer.cli [options]

Example:
    pathtracer --width 256 --height 256 --samples 32 --duration 2 --fps 15 --workers 4
"""

from __future__ import annotations

import argparse
import logging
import multiprocessing
import os
import sys
import time
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, replace
from pathlib import Path

from pathtracer.config import RuntimeConfig, configure_logging, init_taichi
from pathtracer.scene.box import IMAGE_HEIGHT, IMAGE_WIDTH, BoxAnimation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderOptions:
    """Everything a worker needs to render one frame."""

    width: int = IMAGE_WIDTH
    height: int = IMAGE_HEIGHT
    sample_count: int = 128
    indirect_count: int = 4
    max_value: float = 1024.0
    duration: float = 1.0 / 15.0
    fps: float = 15.0
    output_dir: Path = Path(".")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the animated box scene to PNG frames.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=IMAGE_WIDTH, help="Image width in pixels")
    parser.add_argument("--height", type=int, default=IMAGE_HEIGHT, help="Image height in pixels")
    parser.add_argument("--samples", type=int, default=128, help="Samples per pixel")
    parser.add_argument("--indirect", type=int, default=4, help="Bounces after the primary hit")
    parser.add_argument(
        "--max-value",
        type=float,
        default=1024.0,
        help="Radiance mapped to full brightness",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=1.0 / 15.0,
        help="Animation length in seconds",
    )
    parser.add_argument("--fps", type=float, default=15.0, help="Frames per second")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("."),
        help="Directory for the <frame>.png files",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Worker processes rendering frames in parallel",
    )
    parser.add_argument("--gpu", action="store_true", help="Use a GPU backend if available")
    parser.add_argument("--seed", type=int, default=0, help="Random seed")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )

    args = parser.parse_args(argv)
    if args.width <= 0 or args.height <= 0:
        parser.error("--width and --height must be positive")
    if args.samples < 0 or args.indirect < 0:
        parser.error("--samples and --indirect must be non-negative")
    if args.max_value <= 0.0:
        parser.error("--max-value must be positive")
    if args.duration <= 0.0 or args.fps <= 0.0:
        parser.error("--duration and --fps must be positive")
    if args.workers < 1:
        parser.error("--workers must be at least 1")
    return args


def options_from_args(args: argparse.Namespace) -> RenderOptions:
    return RenderOptions(
        width=args.width,
        height=args.height,
        sample_count=args.samples,
        indirect_count=args.indirect,
        max_value=args.max_value,
        duration=args.duration,
        fps=args.fps,
        output_dir=args.output_dir,
    )


def render_frame(frame: int, options: RenderOptions) -> Path:
    """Render one frame of the box animation and save it as <frame>.png.

    Taichi must already be initialised in the calling process.

    Returns:
        Path to the saved image.
    """
    # Lazy imports to allow Taichi initialization first
    from pathtracer.core.buffer import ImageBuffer
    from pathtracer.core.integrator import Renderer
    from pathtracer.preview.export import save_png
    from pathtracer.scene.box import create_box_scene

    animation = BoxAnimation(duration=options.duration, fps=options.fps)
    scene = create_box_scene(animation.frame_time(frame), animation.duration)

    buffer = ImageBuffer(options.width, options.height)
    Renderer(
        sample_count=options.sample_count,
        indirect_count=options.indirect_count,
        max_value=options.max_value,
    ).render(scene, buffer)

    return save_png(buffer, options.output_dir / f"{frame}.png")


def worker_config(config: RuntimeConfig, pid: int) -> RuntimeConfig:
    """Config for the worker process `pid`, with its own random seed."""
    return replace(config, random_seed=config.random_seed + pid)


def _init_worker(config: RuntimeConfig) -> None:
    configure_logging(config.log_level)
    # Workers sharing a seed would render identical noise on every frame
    init_taichi(worker_config(config, os.getpid()))


def render_animation(options: RenderOptions, config: RuntimeConfig, workers: int = 1) -> list[Path]:
    """Render every frame of the animation.

    With workers == 1 frames render in this process, which must already have
    called init_taichi(). Otherwise each worker process initialises its own
    runtime from `config`, seeded from the worker's process id.

    Returns:
        Paths of the saved frames, in frame order.
    """
    frame_count = BoxAnimation(duration=options.duration, fps=options.fps).frame_count
    options.output_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Rendering %d frame(s) at %dx%d", frame_count, options.width, options.height)

    paths: list[Path] = []
    if workers == 1:
        for frame in range(frame_count):
            start_time = time.perf_counter()
            paths.append(render_frame(frame, options))
            logger.info(
                "Frame %d/%d done in %.2fs",
                frame + 1,
                frame_count,
                time.perf_counter() - start_time,
            )
        return paths

    with ProcessPoolExecutor(
        max_workers=workers,
        # Fresh interpreters, so no Taichi runtime state is inherited from the parent
        mp_context=multiprocessing.get_context("spawn"),
        initializer=_init_worker,
        initargs=(config,),
    ) as executor:
        futures = [executor.submit(render_frame, frame, options) for frame in range(frame_count)]
        for frame, future in enumerate(futures):
            paths.append(future.result())
            logger.info("Frame %d/%d done", frame + 1, frame_count)
    return paths


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    config = RuntimeConfig(
        arch="gpu" if args.gpu else "cpu",
        random_seed=args.seed,
        log_level=args.log_level,
    )
    configure_logging(config.log_level)

    start_time = time.perf_counter()
    try:
        if args.workers == 1:
            init_taichi(config)
        render_animation(options_from_args(args), config, workers=args.workers)
    except Exception:
        logger.exception("Rendering failed")
        return 1

    logger.info("Total time: %.2fs", time.perf_counter() - start_time)
    return 0


if __name__ == "__main__":
    sys.exit(main())
