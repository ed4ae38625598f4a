"""
Tests for uploaded image validation and storage
"""

import io
import logging
import re

import pytest

from agrichannel.core.errors import InvalidFileError
from agrichannel.services.image_intake import ImageIntake, generate_filename

NAME_PATTERN = re.compile(r"^\d{13}-[0-9a-f]{12}\.(png|jpg|jpeg|webp)$")
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


class TestImageIntake:
    @pytest.fixture(autouse=True)
    def _intake(self, tmp_path):
        self.root = tmp_path / "uploads"
        self.intake = ImageIntake(self.root, max_bytes=1024)

    def test_generate_filename_format(self):
        first = generate_filename(".png")
        second = generate_filename(".png")

        assert NAME_PATTERN.match(first)
        assert first != second

    @pytest.mark.parametrize(
        "name, mime",
        [
            ("photo.png", "image/png"),
            ("photo.jpg", "image/jpeg"),
            ("photo.jpeg", "image/jpeg"),
            ("photo.webp", "image/webp"),
            ("PHOTO.PNG", "image/png"),
        ],
    )
    def test_accepts_allowed_images(self, name, mime):
        filename = self.intake.accept(name, mime, io.BytesIO(PNG_BYTES))

        assert NAME_PATTERN.match(filename)
        assert filename.endswith(name.rsplit(".", 1)[1].lower())
        assert (self.root / filename).read_bytes() == PNG_BYTES

    @pytest.mark.parametrize(
        "name, mime",
        [
            ("virus.exe", "application/octet-stream"),
            ("virus.exe", "image/png"),
            ("photo.png", "text/plain"),
            ("photo.gif", "image/gif"),
            ("noextension", "image/png"),
            (None, None),
        ],
    )
    def test_rejects_disallowed_files(self, name, mime):
        with pytest.raises(InvalidFileError):
            self.intake.accept(name, mime, io.BytesIO(PNG_BYTES))
        assert not self.root.exists() or list(self.root.iterdir()) == []

    def test_rejects_oversized_file(self):
        with pytest.raises(InvalidFileError):
            self.intake.accept("big.png", "image/png", io.BytesIO(b"x" * 1025))
        assert not self.root.exists() or list(self.root.iterdir()) == []

    def test_accepts_file_at_size_limit(self):
        filename = self.intake.accept("edge.png", "image/png", io.BytesIO(b"x" * 1024))
        assert (self.root / filename).stat().st_size == 1024

    def test_default_limit_is_four_mib(self):
        assert ImageIntake(self.root).max_bytes == 4 * 1024 * 1024

    def test_exists_and_remove(self):
        filename = self.intake.accept("photo.png", "image/png", io.BytesIO(PNG_BYTES))

        assert self.intake.exists(filename)
        assert self.intake.remove(filename) is True
        assert not self.intake.exists(filename)
        assert self.intake.remove(filename) is False

    def test_remove_nothing(self):
        assert self.intake.remove(None) is False
        assert self.intake.exists(None) is False

    def test_remove_stays_inside_media_root(self, tmp_path):
        outside = tmp_path / "secret.png"
        outside.write_bytes(b"keep me")

        assert self.intake.remove("../secret.png") is False
        assert outside.exists()

    def test_remove_failure_is_logged_not_raised(self, caplog):
        self.root.mkdir(parents=True)
        (self.root / "stuck.png").mkdir()

        with caplog.at_level(logging.WARNING, logger="agrichannel.services.image_intake"):
            assert self.intake.remove("stuck.png") is False

        assert "Failed to delete image file" in caplog.text
