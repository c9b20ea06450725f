from __future__ import annotations

import logging
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Optional, Union

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from gorsky.errors import DecodeError, EncodeError, NotFound

logger = logging.getLogger(__name__)

# Pillow format name -> file extension handed to cv2.imencode
_ENCODE_EXT = {
	"png": ".png",
	"tiff": ".tif",
	"jpeg": ".jpg",
	"mpo": ".jpg",
}


@dataclass
class DecodedImage:
	pixels: np.ndarray  # Shape (H, W) or (H, W, C), dtype uint8/uint16, BGR(A) order.
	format: str  # Lower-case Pillow format name: "jpeg", "png", "tiff", ...
	path: Optional[Path] = None


def detect_format(data: bytes) -> str:
	try:
		with Image.open(BytesIO(data)) as img:
			fmt = img.format
	except (UnidentifiedImageError, OSError) as e:
		raise DecodeError(f"Unrecognised image data: {e}") from e
	if not fmt:
		raise DecodeError("Unrecognised image data")
	return fmt.lower()


def decode_bytes(data: bytes) -> DecodedImage:
	fmt = detect_format(data)
	buf = np.frombuffer(data, dtype=np.uint8)
	arr = cv2.imdecode(buf, cv2.IMREAD_UNCHANGED)
	if arr is None:
		raise DecodeError(f"Could not decode {fmt} image data")
	return DecodedImage(pixels=arr, format=fmt)


def decode_file(path: Union[str, Path]) -> DecodedImage:
	"""Read and decode a single image from disk, keeping its bit depth."""
	path = Path(path)
	if not path.is_file():
		raise NotFound(f"Image not found: {path}")
	try:
		data = path.read_bytes()
	except OSError as e:
		raise DecodeError(f"Could not read {path}: {e}") from e
	decoded = decode_bytes(data)
	decoded.path = path
	logger.debug(f"Decoded {path.name}: {decoded.format} {decoded.pixels.shape} {decoded.pixels.dtype}")
	return decoded


def encode_bytes(composite: np.ndarray, fmt: str) -> bytes:
	"""
	Encode an RGBA uint16 composite [H,W,4] in the given format.
	PNG and TIFF keep 16-bit RGBA; JPEG is written as 8-bit RGB.
	"""
	fmt = fmt.lower()
	ext = _ENCODE_EXT.get(fmt)
	if ext is None:
		raise EncodeError(f"Unsupported output format: {fmt}")
	if ext == ".jpg":
		arr = (composite[..., [2, 1, 0]] >> 8).astype(np.uint8)
	else:
		arr = composite[..., [2, 1, 0, 3]]
	ok, buf = cv2.imencode(ext, arr)
	if not ok:
		raise EncodeError(f"Could not encode image as {fmt}")
	return buf.tobytes()


def encode_file(composite: np.ndarray, fmt: str, destination: Union[str, Path]) -> Path:
	destination = Path(destination)
	data = encode_bytes(composite, fmt)
	try:
		destination.write_bytes(data)
	except OSError as e:
		raise EncodeError(f"Could not write {destination}: {e}") from e
	logger.debug(f"Wrote {destination} ({fmt}, {composite.shape[1]}x{composite.shape[0]})")
	return destination
