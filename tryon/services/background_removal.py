"""
remove.bg client, used for the background-removed fallback tier and the
standalone background-removal endpoint.
"""

import logging
from typing import Optional

import requests

from tryon.exceptions import BackgroundRemovalError

logger = logging.getLogger(__name__)

DEFAULT_REMOVE_BG_URL = 'https://api.remove.bg/v1.0/removebg'


class RemoveBgClient:

    def __init__(self, api_key: str, url: str = DEFAULT_REMOVE_BG_URL,
                 session: Optional[requests.Session] = None, timeout: float = 30):
        self.api_key = api_key
        self.url = url
        self.session = session or requests.Session()
        self.timeout = timeout

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def remove_background(self, image_url: str) -> bytes:
        """Return the processed image bytes for a fetchable image URL."""
        logger.info("Removing background from %s", image_url)
        return self._remove(data={'image_url': image_url, 'size': 'auto', 'format': 'auto'})

    def remove_background_from_file(self, image_bytes: bytes, filename: str = 'image',
                                    content_type: str = 'application/octet-stream') -> bytes:
        """Return the processed image bytes for an uploaded image."""
        logger.info("Removing background from uploaded file %s (%d bytes)", filename, len(image_bytes))
        return self._remove(
            data={'size': 'auto', 'format': 'auto'},
            files={'image_file': (filename, image_bytes, content_type)},
        )

    def _remove(self, data, files=None) -> bytes:
        if not self.is_configured():
            raise BackgroundRemovalError("Remove.bg API key not configured")

        try:
            response = self.session.post(
                self.url,
                data=data,
                files=files,
                headers={'X-Api-Key': self.api_key},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise BackgroundRemovalError(f"Remove.bg request failed: {e}")

        if not response.ok:
            logger.error("Remove.bg API error: %s %s", response.status_code, response.text[:200])
            raise BackgroundRemovalError(f"Remove.bg returned status {response.status_code}")
        if not response.content:
            raise BackgroundRemovalError("Remove.bg returned an empty body")
        return response.content
