"""
Image Transfer Adapter: turns any image reference into a URL the try-on
provider can fetch.

External URLs pass through unchanged. Inline ``data:image/...;base64,``
payloads are decoded, checked with Pillow and uploaded to object storage
under a namespaced, dated path.
"""

import base64
import binascii
import logging
import re
import uuid
from datetime import datetime
from io import BytesIO
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from tryon.exceptions import InvalidEncoding, StorageUploadError

logger = logging.getLogger(__name__)

DATA_URL_RE = re.compile(r'^data:image/([a-zA-Z0-9.+-]+);base64,(.+)$', re.DOTALL)

# data URL subtype -> Pillow format
SUPPORTED_FORMATS = {
    'png': 'PNG',
    'jpeg': 'JPEG',
    'jpg': 'JPEG',
    'webp': 'WEBP',
    'gif': 'GIF',
}

# Pillow format -> file extension
EXTENSIONS = {
    'PNG': 'png',
    'JPEG': 'jpg',
    'MPO': 'jpg',
    'WEBP': 'webp',
    'GIF': 'gif',
}


def is_data_url(ref: str) -> bool:
    return bool(ref) and ref.startswith('data:')


def detect_image_format(image_bytes: bytes) -> str:
    """Return the Pillow format name of an image, raising InvalidEncoding if unreadable."""
    try:
        with Image.open(BytesIO(image_bytes)) as img:
            pil_format = img.format
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise InvalidEncoding(f"Payload is not a readable image: {e}")
    if pil_format not in EXTENSIONS:
        raise InvalidEncoding(f"Unsupported image format: {pil_format}")
    return pil_format


def parse_data_url(ref: str) -> Tuple[str, bytes]:
    """
    Decode an inline image payload.

    Returns:
        (pillow_format, raw_bytes)

    Raises:
        InvalidEncoding: the header is not a supported image type, the payload
        is not base64, or the decoded bytes are a different format than the
        header claims.
    """
    match = DATA_URL_RE.match(ref or '')
    if not match:
        raise InvalidEncoding("Invalid data URL format")

    subtype, payload = match.group(1).lower(), match.group(2)
    declared = SUPPORTED_FORMATS.get(subtype)
    if declared is None:
        raise InvalidEncoding(f"Unsupported image type in data URL: image/{subtype}")

    try:
        raw = base64.b64decode(re.sub(r'\s+', '', payload), validate=True)
    except (binascii.Error, ValueError):
        raise InvalidEncoding("Data URL payload is not valid base64")
    if not raw:
        raise InvalidEncoding("Data URL payload is empty")

    detected = detect_image_format(raw)
    if EXTENSIONS[detected] != EXTENSIONS[declared]:
        raise InvalidEncoding(f"Data URL declares image/{subtype} but payload is {detected}")
    return detected, raw


def build_remote_path(namespace: str, prefix: str, extension: str) -> str:
    date_path = datetime.now().strftime('%Y/%m/%d')
    unique_id = str(uuid.uuid4())[:8]
    return f"{namespace.strip('/')}/{date_path}/{prefix}_{unique_id}.{extension}"


class ImageTransferAdapter:

    def __init__(self, storage):
        self.storage = storage

    def validate(self, ref: str) -> None:
        """Reject malformed inline payloads without uploading anything."""
        if is_data_url(ref):
            parse_data_url(ref)

    def ensure_url(self, ref: str, namespace: str = 'tryon', prefix: str = 'image') -> str:
        """Return a provider-fetchable URL for ``ref``, uploading inline payloads."""
        if not is_data_url(ref):
            return ref

        pil_format, raw = parse_data_url(ref)
        url, _ = self._upload(raw, pil_format, namespace, prefix)
        return url

    def upload_bytes(self, image_bytes: bytes, namespace: str, prefix: str = 'image') -> Tuple[str, str]:
        """Upload raw image bytes; returns (public_url, remote_path)."""
        pil_format = detect_image_format(image_bytes)
        return self._upload(image_bytes, pil_format, namespace, prefix)

    def _upload(self, raw: bytes, pil_format: str, namespace: str, prefix: str) -> Tuple[str, str]:
        extension = EXTENSIONS[pil_format]
        remote_path = build_remote_path(namespace, prefix, extension)
        content_type = 'image/jpeg' if extension == 'jpg' else f'image/{extension}'

        logger.info("Uploading %d byte %s image to storage: %s", len(raw), pil_format, remote_path)
        url = self.storage.upload_file_from_bytes(raw, remote_path, content_type)
        if not url:
            raise StorageUploadError(f"Failed to upload image to storage: {remote_path}")
        return url, remote_path
