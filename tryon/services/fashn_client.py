"""
HTTP client for the Fashn virtual try-on API.

The provider runs jobs asynchronously: ``submit`` returns a job id and
``status`` reports ``{status, output?, error?}`` for it. Polling lives in
the orchestrator.
"""

import logging
from typing import Optional

import requests

from tryon.exceptions import ProviderTransportError, SubmissionError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = 'https://api.fashn.ai/v1'
DEFAULT_MODEL_NAME = 'tryon-v1.6'

# provider category -> garment keywords
PROVIDER_CATEGORY_KEYWORDS = (
    ('tops', ('shirt', 'top', 'blouse', 'tshirt', 't-shirt', 'sweater', 'hoodie', 'jacket', 'coat')),
    ('bottoms', ('pants', 'trouser', 'jeans', 'shorts', 'skirt', 'leggings')),
    ('one-pieces', ('dress', 'jumpsuit', 'romper', 'onepiece', 'one-piece')),
)


def map_garment_to_provider_category(garment_type: Optional[str]) -> str:
    """Map a free-text garment label to the provider's tops/bottoms/one-pieces/auto."""
    garment = (garment_type or '').lower()
    for category, keywords in PROVIDER_CATEGORY_KEYWORDS:
        if any(keyword in garment for keyword in keywords):
            return category
    return 'auto'


class FashnClient:

    def __init__(self, api_key: str, base_url: str = DEFAULT_BASE_URL,
                 model_name: str = DEFAULT_MODEL_NAME,
                 session: Optional[requests.Session] = None, timeout: float = 30):
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.model_name = model_name
        self.session = session or requests.Session()
        self.timeout = timeout

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _headers(self):
        return {
            'Authorization': f'Bearer {self.api_key}',
            'Content-Type': 'application/json',
        }

    def submit(self, model_image_url: str, garment_image_url: str, category: str = 'auto') -> str:
        """
        Start a try-on job.

        Returns:
            The provider job id.

        Raises:
            SubmissionError: transport failure, non-2xx response, or no id in the body.
        """
        payload = {
            'model_name': self.model_name,
            'inputs': {
                'model_image': model_image_url,
                'garment_image': garment_image_url,
                'category': category,
            },
        }
        logger.info("Submitting try-on job: model=%s category=%s", self.model_name, category)

        try:
            response = self.session.post(
                f'{self.base_url}/run', json=payload, headers=self._headers(), timeout=self.timeout
            )
        except requests.RequestException as e:
            raise SubmissionError(f"Try-on submission request failed: {e}")

        if not response.ok:
            raise SubmissionError(
                f"Try-on submission rejected with status {response.status_code}: {response.text[:200]}"
            )

        try:
            body = response.json()
        except ValueError:
            raise SubmissionError("Try-on submission returned a non-JSON body")

        job_id = body.get('id') if isinstance(body, dict) else None
        if not job_id:
            raise SubmissionError("No prediction ID returned from try-on provider")

        logger.info("Try-on job submitted: %s", job_id)
        return str(job_id)

    def status(self, job_id: str, timeout: Optional[float] = None) -> dict:
        """
        Fetch the status document of a job.

        ``timeout`` caps the request timeout below the client default.

        Raises:
            ProviderTransportError: transport failure, non-2xx response, or a non-JSON body.
        """
        try:
            response = self.session.get(
                f'{self.base_url}/status/{job_id}', headers=self._headers(),
                timeout=self.timeout if timeout is None else min(self.timeout, timeout)
            )
        except requests.RequestException as e:
            raise ProviderTransportError(f"Status request failed: {e}")

        if not response.ok:
            raise ProviderTransportError(
                f"Status request returned {response.status_code}", status_code=response.status_code
            )

        try:
            body = response.json()
        except ValueError:
            raise ProviderTransportError("Status response is not JSON", status_code=response.status_code)
        if not isinstance(body, dict):
            raise ProviderTransportError("Status response is not an object", status_code=response.status_code)
        return body
