from __future__ import annotations

import cv2
import numpy as np
import pytest

from gorsky.errors import DecodeError, EncodeError, NotFound
from gorsky.services.image_io import decode_file, encode_file


def _rgba(height: int = 12, width: int = 16) -> np.ndarray:
	out = np.zeros((height, width, 4), dtype=np.uint16)
	out[..., 0] = 60000
	out[..., 1] = 30000
	out[..., 2] = 1000
	out[..., 3] = 65535
	return out


def test_decode_keeps_sixteen_bit_grayscale(tmp_path) -> None:
	path = tmp_path / "negative.png"
	frame = np.arange(30 * 20, dtype=np.uint16).reshape(30, 20) * 100
	assert cv2.imwrite(str(path), frame)

	decoded = decode_file(path)

	assert decoded.format == "png"
	assert decoded.pixels.dtype == np.uint16
	assert np.array_equal(decoded.pixels, frame)
	assert decoded.path == path


def test_decode_detects_tiff(tmp_path) -> None:
	path = tmp_path / "negative.tif"
	assert cv2.imwrite(str(path), np.zeros((9, 9), dtype=np.uint16))

	assert decode_file(path).format == "tiff"


def test_missing_file_raises_not_found(tmp_path) -> None:
	with pytest.raises(NotFound):
		decode_file(tmp_path / "missing.png")
	with pytest.raises(FileNotFoundError):
		decode_file(tmp_path)


def test_garbage_bytes_raise_decode_error(tmp_path) -> None:
	path = tmp_path / "broken.png"
	path.write_bytes(b"definitely not an image")

	with pytest.raises(DecodeError):
		decode_file(path)


def test_png_output_keeps_rgba_sixteen_bit(tmp_path) -> None:
	dest = encode_file(_rgba(), "png", tmp_path / "out.png")

	written = cv2.imread(str(dest), cv2.IMREAD_UNCHANGED)
	assert written.dtype == np.uint16
	assert written.shape == (12, 16, 4)
	# OpenCV reads back in BGRA order
	assert written[0, 0].tolist() == [1000, 30000, 60000, 65535]


def test_jpeg_output_is_eight_bit_rgb(tmp_path) -> None:
	dest = encode_file(_rgba(), "jpeg", tmp_path / "out.jpg")

	decoded = decode_file(dest)
	assert decoded.format == "jpeg"
	assert decoded.pixels.dtype == np.uint8
	assert decoded.pixels.shape == (12, 16, 3)


def test_unknown_output_format_raises_encode_error(tmp_path) -> None:
	with pytest.raises(EncodeError):
		encode_file(_rgba(), "gif", tmp_path / "out.gif")


def test_unwritable_destination_raises_encode_error(tmp_path) -> None:
	with pytest.raises(EncodeError):
		encode_file(_rgba(), "png", tmp_path / "no-such-dir" / "out.png")
