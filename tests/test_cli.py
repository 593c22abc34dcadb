"""Tests for the command-line entry point."""

import tempfile
from pathlib import Path

import cv2
import numpy as np
import pytest

from data_augmentation.cli import build_parser, main


@pytest.fixture
def workdir(monkeypatch):
    with tempfile.TemporaryDirectory() as d:
        monkeypatch.chdir(d)
        monkeypatch.delenv("DATA_AUGMENTATION_CONFIG", raising=False)
        yield Path(d)


def _setup_inputs(workdir):
    img = np.random.default_rng(0).integers(0, 256, size=(60, 80, 3), dtype=np.uint8)
    cv2.imwrite(str(workdir / "src.png"), img)
    (workdir / "gt.txt").write_text(f"{workdir / 'src.png'} 2 5 5 20 20 30 10 40 30\n")
    (workdir / "config.txt").write_text(
        "generate_num = 2\nyaw_sigma = 3\nnoise_max_sigma = 5\nblur_max_sigma = 1\n"
    )


class TestParser:
    def test_defaults(self, workdir):
        args = build_parser().parse_args(["in", "out"])
        assert args.conf == "config.txt"
        assert args.anno == "annotation.txt"
        assert args.seed is None

    def test_config_from_environment(self, workdir, monkeypatch):
        monkeypatch.setenv("DATA_AUGMENTATION_CONFIG", "other.txt")
        args = build_parser().parse_args(["in", "out"])
        assert args.conf == "other.txt"


class TestMain:
    def test_annotation_input(self, workdir):
        _setup_inputs(workdir)
        main(["gt.txt", "out", "-a", "result.txt", "--seed", "1"])

        outputs = sorted(p.name for p in (workdir / "out").iterdir())
        assert outputs == ["img0_0_0.png", "img0_0_1.png", "img0_1_0.png", "img0_1_1.png"]

        lines = (workdir / "result.txt").read_text().splitlines()
        assert len(lines) == 4
        for line in lines:
            path, count, x, y, w, h = line.split(" ")
            written = cv2.imread(path)
            assert count == "1"
            assert (x, y) == ("0", "0")
            assert (int(w), int(h)) == (written.shape[1], written.shape[0])

    def test_single_image_input(self, workdir):
        _setup_inputs(workdir)
        main(["src.png", "out"])
        assert sorted(p.name for p in (workdir / "out").iterdir()) == [
            "img0_0_0.png",
            "img0_0_1.png",
        ]
        assert len((workdir / "annotation.txt").read_text().splitlines()) == 2

    def test_seed_makes_runs_identical(self, workdir):
        _setup_inputs(workdir)
        main(["gt.txt", "out1", "-a", "a1.txt", "--seed", "5"])
        main(["gt.txt", "out2", "-a", "a2.txt", "--seed", "5"])
        for name in ["img0_0_0.png", "img0_1_1.png"]:
            a = cv2.imread(str(workdir / "out1" / name))
            b = cv2.imread(str(workdir / "out2" / name))
            assert np.array_equal(a, b)

    def test_missing_config_exits(self, workdir):
        _setup_inputs(workdir)
        with pytest.raises(SystemExit) as exc:
            main(["gt.txt", "out", "-c", "missing.txt"])
        assert exc.value.code == 1

    def test_missing_annotation_file_exits(self, workdir):
        _setup_inputs(workdir)
        with pytest.raises(SystemExit) as exc:
            main(["nothing.txt", "out"])
        assert exc.value.code == 1

    def test_empty_directory_exits(self, workdir):
        _setup_inputs(workdir)
        (workdir / "empty").mkdir()
        with pytest.raises(SystemExit) as exc:
            main(["empty", "out"])
        assert exc.value.code == 1

    def test_output_folder_is_a_file_exits(self, workdir):
        _setup_inputs(workdir)
        (workdir / "out").write_text("not a folder")
        with pytest.raises(SystemExit) as exc:
            main(["gt.txt", "out"])
        assert exc.value.code == 1
        assert not (workdir / "annotation.txt").exists()
