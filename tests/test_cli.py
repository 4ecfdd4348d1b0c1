"""Tests for the command-line entry point.

Tests that call main() or worker initialisation patch out init_taichi: a
second ti.init() would invalidate the session runtime set up in conftest.py.
"""

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

import pathtracer.cli as cli
from pathtracer.cli import (
    RenderOptions,
    main,
    options_from_args,
    parse_args,
    render_animation,
    render_frame,
    worker_config,
)
from pathtracer.config import RuntimeConfig


class TestParseArgs:
    """Tests for argument parsing."""

    def test_defaults(self):
        args = parse_args([])
        assert args.width == 512
        assert args.height == 512
        assert args.samples == 128
        assert args.indirect == 4
        assert args.max_value == 1024.0
        assert args.fps == 15.0
        assert args.workers == 1
        assert args.gpu is False
        assert args.output_dir == Path(".")

    def test_options_from_args(self):
        args = parse_args(
            ["--width", "64", "--height", "32", "--samples", "8", "--indirect", "2",
             "--max-value", "16", "--duration", "2", "--fps", "5", "--output-dir", "out"]
        )
        options = options_from_args(args)
        assert options == RenderOptions(
            width=64,
            height=32,
            sample_count=8,
            indirect_count=2,
            max_value=16.0,
            duration=2.0,
            fps=5.0,
            output_dir=Path("out"),
        )

    @pytest.mark.parametrize(
        "argv",
        [
            ["--width", "0"],
            ["--samples", "-1"],
            ["--max-value", "0"],
            ["--fps", "0"],
            ["--workers", "0"],
            ["--log-level", "LOUD"],
        ],
    )
    def test_invalid(self, argv):
        with pytest.raises(SystemExit):
            parse_args(argv)


class TestRenderFrame:
    """Tests for rendering a single frame to disk."""

    def test_render_frame_writes_png(self, tmp_path):
        options = RenderOptions(
            width=8,
            height=8,
            sample_count=2,
            indirect_count=1,
            max_value=8.0,
            output_dir=tmp_path,
        )

        path = render_frame(0, options)

        assert path == tmp_path / "0.png"
        with Image.open(path) as img:
            assert img.size == (8, 8)
            pixels = np.asarray(img)
        # The light fills the center of the first frame
        assert pixels[4, 4].tolist() == [255, 255, 255]


def _small_options(output_dir):
    # Two frames: 0.2 s at 10 fps
    return RenderOptions(
        width=8,
        height=8,
        sample_count=1,
        indirect_count=1,
        max_value=8.0,
        duration=0.2,
        fps=10.0,
        output_dir=output_dir,
    )


class TestRenderAnimation:
    """Tests for rendering every frame of the animation."""

    def test_serial_writes_every_frame(self, tmp_path):
        paths = render_animation(_small_options(tmp_path), RuntimeConfig(), workers=1)

        assert paths == [tmp_path / "0.png", tmp_path / "1.png"]
        for path in paths:
            with Image.open(path) as img:
                assert img.size == (8, 8)

    def test_creates_output_dir(self, tmp_path):
        output_dir = tmp_path / "frames" / "box"
        paths = render_animation(_small_options(output_dir), RuntimeConfig(), workers=1)

        assert output_dir.is_dir()
        assert all(path.exists() for path in paths)

    def test_worker_pool_writes_every_frame(self, tmp_path):
        paths = render_animation(_small_options(tmp_path), RuntimeConfig(), workers=2)

        assert paths == [tmp_path / "0.png", tmp_path / "1.png"]
        for path in paths:
            with Image.open(path) as img:
                assert img.size == (8, 8)


class TestWorkerSeeds:
    """Tests for per-process seeding of worker runtimes."""

    def test_worker_config_offsets_seed(self):
        config = RuntimeConfig(arch="gpu", random_seed=5, log_level="DEBUG")

        derived = worker_config(config, 101)

        assert derived.random_seed == 106
        assert derived.arch == "gpu"
        assert derived.log_level == "DEBUG"

    def test_workers_get_distinct_seeds(self, monkeypatch):
        seeds = []
        pids = iter([101, 202])
        monkeypatch.setattr(cli, "configure_logging", lambda level: None)
        monkeypatch.setattr(cli, "init_taichi", lambda config: seeds.append(config.random_seed))
        monkeypatch.setattr(cli.os, "getpid", lambda: next(pids))

        cli._init_worker(RuntimeConfig(random_seed=5))
        cli._init_worker(RuntimeConfig(random_seed=5))

        assert seeds == [106, 207]


class TestMain:
    """Tests for the exit status of main()."""

    @pytest.fixture
    def calls(self, monkeypatch):
        calls = {"init": [], "render": []}
        monkeypatch.setattr(cli, "configure_logging", lambda level: None)
        monkeypatch.setattr(cli, "init_taichi", lambda config: calls["init"].append(config))
        return calls

    def test_success(self, calls, monkeypatch, tmp_path):
        def fake_render(options, config, workers=1):
            calls["render"].append((options, workers))
            return []

        monkeypatch.setattr(cli, "render_animation", fake_render)

        status = main(["--width", "8", "--height", "8", "--seed", "3", "--output-dir", str(tmp_path)])

        assert status == 0
        assert [config.random_seed for config in calls["init"]] == [3]
        options, workers = calls["render"][0]
        assert (options.width, options.height, options.output_dir) == (8, 8, tmp_path)
        assert workers == 1

    def test_workers_skip_local_init(self, calls, monkeypatch):
        monkeypatch.setattr(cli, "render_animation", lambda options, config, workers=1: [])

        assert main(["--workers", "2"]) == 0
        assert calls["init"] == []

    def test_render_failure_returns_one(self, calls, monkeypatch):
        def failing_render(options, config, workers=1):
            raise RuntimeError("out of memory")

        monkeypatch.setattr(cli, "render_animation", failing_render)

        assert main(["--width", "8", "--height", "8"]) == 1
