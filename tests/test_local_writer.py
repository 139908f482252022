"""
Tests for the local PNG writer.
"""

import cv2
import numpy as np

from core.writer.local_writer import LocalImageWriter, pngPath


class TestPngPath:
    def test_png_suffix_is_kept(self):
        assert pngPath("out/code.PNG").name == "code.PNG"

    def test_other_suffix_gets_png_appended(self):
        assert pngPath("out/code.jpg").name == "code.jpg.png"
        assert pngPath("out/code").name == "code.png"


class TestLocalImageWriter:
    """Tests for saving and encoding QR images."""

    def test_save_creates_directories(self, tmp_path, blankImage):
        target = tmp_path / "nested" / "qr.png"
        saved = LocalImageWriter().save(blankImage, str(target))

        assert saved == str(target)
        assert target.read_bytes().startswith(b"\x89PNG")

    def test_save_never_writes_lossy_formats(self, tmp_path, blankImage):
        """A .jpg destination still produces a PNG file."""
        saved = LocalImageWriter().save(blankImage, str(tmp_path / "qr.jpg"))

        assert saved == str(tmp_path / "qr.jpg.png")
        assert not (tmp_path / "qr.jpg").exists()

    def test_save_reports_unwritable_destination(self, tmp_path, blankImage):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        assert LocalImageWriter().save(blankImage, str(blocker / "qr.png")) is None

    def test_encode_is_lossless(self):
        image = np.zeros((21, 21), dtype=np.uint8)
        image[::2, ::2] = 255

        decoded = cv2.imdecode(
            np.frombuffer(LocalImageWriter().encode(image), dtype=np.uint8),
            cv2.IMREAD_GRAYSCALE
        )

        assert np.array_equal(decoded, image)
