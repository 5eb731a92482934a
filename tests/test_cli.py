"""
Tests for the pixelscramble command line.
"""

import logging

import numpy as np
import pytest
from PIL import Image

from pixelscramble.cli import main
from pixelscramble.codec import load_image
from pixelscramble.config import ScrambleConfig


class TestScrambleRestore:

    def test_round_trip_with_key(self, tmp_path, png_file, rgba_pixels, capsys):
        scrambled = tmp_path / "scrambled.png"
        restored = tmp_path / "restored.png"

        assert main(["scramble", "--in", str(png_file), "--out", str(scrambled), "--key", "myKey"]) == 0
        assert "Done: scramble" in capsys.readouterr().out
        assert not np.array_equal(load_image(scrambled).pixels, rgba_pixels)

        assert main(["restore", "--in", str(scrambled), "--out", str(restored), "--key", "myKey"]) == 0
        assert np.array_equal(load_image(restored).pixels, rgba_pixels)

    def test_wrong_key_does_not_restore(self, tmp_path, png_file, rgba_pixels):
        scrambled = tmp_path / "scrambled.png"
        restored = tmp_path / "restored.png"

        main(["scramble", "--in", str(png_file), "--out", str(scrambled), "--key", "right"])
        main(["restore", "--in", str(scrambled), "--out", str(restored), "--key", "wrong"])

        assert not np.array_equal(load_image(restored).pixels, rgba_pixels)

    def test_tracked_scramble(self, tmp_path, png_file):
        out = tmp_path / "tracked.png"
        assert main(["scramble", "--in", str(png_file), "--out", str(out), "--track"]) == 0
        assert out.exists()

    def test_restore_requires_key(self, tmp_path, png_file):
        assert main(["restore", "--in", str(png_file), "--out", str(tmp_path / "r.png")]) == 1

    def test_missing_input(self, tmp_path):
        assert main(["scramble", "--in", str(tmp_path / "nope.png"), "--out", str(tmp_path / "o.png")]) == 1

    def test_unsupported_output(self, tmp_path, png_file):
        assert main(["scramble", "--in", str(png_file), "--out", str(tmp_path / "o.bmp")]) == 1

    def test_in_and_out_required(self):
        with pytest.raises(SystemExit) as exc:
            main(["scramble"])
        assert exc.value.code == 2

    def test_bad_quality(self, tmp_path, png_file):
        with pytest.raises(SystemExit):
            main(["scramble", "--in", str(png_file), "--out", str(tmp_path / "o.jpg"), "--quality", "0"])


class TestDemo:

    def test_demo_png(self, tmp_path, png_file, rgba_pixels, capsys):
        rc = main(["demo", "--images-dir", str(tmp_path), "--sample", png_file.name])

        assert rc == 0
        assert "Done: demo" in capsys.readouterr().out
        assert (tmp_path / "scrambled.png").exists()
        assert np.array_equal(load_image(tmp_path / "restored.png").pixels, rgba_pixels)

    def test_demo_missing_sample(self, tmp_path):
        assert main(["demo", "--images-dir", str(tmp_path)]) == 1


class TestConfig:

    def test_defaults(self):
        cfg = ScrambleConfig()
        assert cfg.jpeg_quality == 90
        assert str(cfg.sample_path).endswith("sample.jpg")
        assert cfg.output_path("scrambled", cfg.sample_name).name == "scrambled.jpg"

    def test_rejects_bad_values(self):
        with pytest.raises(ValueError):
            ScrambleConfig(bytes_per_pixel=0)
        with pytest.raises(ValueError):
            ScrambleConfig(jpeg_quality=100)

    def test_from_args_ignores_none(self):
        class Args:
            images_dir = "pics"
            sample_name = None
            jpeg_quality = 75

        cfg = ScrambleConfig.from_args(Args())
        assert cfg.images_dir == "pics"
        assert cfg.sample_name == "sample.jpg"
        assert cfg.jpeg_quality == 75


class TestJpeg:
    """JPEG inputs: the default demo sample and the lossy-restore warning."""

    @pytest.fixture
    def jpeg_sample(self, tmp_path, rgba_pixels):
        path = tmp_path / "sample.jpg"
        Image.fromarray(rgba_pixels).convert("RGB").save(path, format="JPEG", quality=90)
        return path

    def test_demo_default_sample(self, tmp_path, jpeg_sample, capsys):
        assert main(["demo", "--images-dir", str(tmp_path)]) == 0

        assert "Done: demo" in capsys.readouterr().out
        assert load_image(tmp_path / "scrambled.jpg").format == "JPEG"
        restored = load_image(tmp_path / "restored.jpg")
        assert (restored.width, restored.height) == (8, 6)

    def test_restore_from_jpeg_warns(self, tmp_path, jpeg_sample, caplog):
        scrambled = tmp_path / "scrambled.jpg"
        assert main(["scramble", "--in", str(jpeg_sample), "--out", str(scrambled), "--key", "k"]) == 0

        with caplog.at_level(logging.WARNING, logger="pixelscramble"):
            rc = main(["restore", "--in", str(scrambled), "--out", str(tmp_path / "restored.png"), "--key", "k"])

        assert rc == 0
        assert any("approximate" in record.getMessage() for record in caplog.records)
        assert (tmp_path / "restored.png").exists()

    def test_restore_from_png_does_not_warn(self, tmp_path, png_file, caplog):
        with caplog.at_level(logging.WARNING, logger="pixelscramble"):
            main(["restore", "--in", str(png_file), "--out", str(tmp_path / "r.png"), "--key", "k"])

        assert not any("approximate" in record.getMessage() for record in caplog.records)
