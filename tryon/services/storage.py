"""
BunnyCDN Storage client for hosting images at fetchable URLs.
"""

import logging
from typing import Optional

import requests

logger = logging.getLogger(__name__)

STORAGE_API_BASE = 'https://storage.bunnycdn.com'

CONTENT_TYPES = {
    'jpg': 'image/jpeg',
    'jpeg': 'image/jpeg',
    'png': 'image/png',
    'gif': 'image/gif',
    'webp': 'image/webp',
}


def guess_content_type(remote_path: str) -> str:
    extension = remote_path.rsplit('.', 1)[-1].lower() if '.' in remote_path else ''
    return CONTENT_TYPES.get(extension, 'application/octet-stream')


class ObjectStorageClient:
    """
    Uploads files to a BunnyCDN storage zone.

    Constructed explicitly by the composition root
    (tryon.services.container) with its credentials and HTTP session.
    """

    def __init__(self, storage_zone: str, access_key: str, pull_zone: str = '',
                 session: Optional[requests.Session] = None, timeout: float = 30):
        self.storage_zone = storage_zone
        self.access_key = access_key
        self.pull_zone = pull_zone
        self.session = session or requests.Session()
        self.timeout = timeout

        if not self.is_configured():
            logger.warning(
                "BunnyCDN credentials not configured. "
                "Set BUNNY_STORAGE_ZONE and BUNNY_ACCESS_KEY in environment variables or .env file."
            )

    def is_configured(self) -> bool:
        return bool(self.storage_zone and self.access_key)

    def public_url(self, remote_path: str) -> str:
        """Public URL for a stored path, via the pull zone when one is set."""
        if self.pull_zone:
            pull_zone = self.pull_zone.replace('https://', '').replace('http://', '').rstrip('/')
            return f"https://{pull_zone}/{remote_path}"
        return f"{STORAGE_API_BASE}/{self.storage_zone}/{remote_path}"

    def upload_file_from_bytes(
        self,
        file_bytes: bytes,
        remote_path: str,
        content_type: Optional[str] = None
    ) -> Optional[str]:
        """
        Upload file content to BunnyCDN Storage.

        Args:
            file_bytes: File content as bytes
            remote_path: Path in storage (e.g., 'tryon/garments/2025/01/31/garment_ab12cd34.png')
            content_type: MIME type of the file (guessed from the extension if omitted)

        Returns:
            Public URL of the uploaded file if successful, None otherwise
        """
        if not self.is_configured():
            logger.error("BunnyCDN credentials not configured")
            return None

        upload_url = f"{STORAGE_API_BASE}/{self.storage_zone}/{remote_path}"
        headers = {
            'AccessKey': self.access_key,
            'Content-Type': content_type or guess_content_type(remote_path),
        }

        try:
            response = self.session.put(upload_url, data=file_bytes, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("Error uploading file bytes to BunnyCDN: %s", str(e), exc_info=True)
            return None

        if response.status_code in (200, 201):
            public_url = self.public_url(remote_path)
            logger.info("Successfully uploaded file bytes to BunnyCDN: %s", public_url)
            return public_url

        logger.error(
            "Failed to upload file bytes to BunnyCDN. Status: %d, Response: %s",
            response.status_code,
            response.text
        )
        return None
