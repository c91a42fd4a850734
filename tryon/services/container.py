"""
Composition root for the try-on services.

``build_services`` constructs every provider client explicitly from
settings; ``TryonConfig.ready()`` installs the result once at startup and
callers fetch it with ``get_services()``.
"""

import logging
from dataclasses import dataclass

import requests
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from fashion_models.catalog import FashionModelCatalog
from fashion_models.selection import ScoringWeights
from tryon.services.background_removal import DEFAULT_REMOVE_BG_URL, RemoveBgClient
from tryon.services.fashn_client import DEFAULT_BASE_URL, DEFAULT_MODEL_NAME, FashnClient
from tryon.services.image_transfer import ImageTransferAdapter
from tryon.services.orchestrator import TryOnOrchestrator
from tryon.services.outcome import OutcomeRecorder
from tryon.services.pipeline import TryOnPipeline
from tryon.services.storage import ObjectStorageClient

logger = logging.getLogger(__name__)


@dataclass
class TryOnServices:
    storage: ObjectStorageClient
    image_transfer: ImageTransferAdapter
    fashn: FashnClient
    background_remover: RemoveBgClient
    orchestrator: TryOnOrchestrator
    catalog: FashionModelCatalog
    recorder: OutcomeRecorder
    pipeline: TryOnPipeline


_services = None


def build_services(session=None) -> TryOnServices:
    config = getattr(settings, 'TRYON_CONFIG', {})
    selection_config = getattr(settings, 'FASHION_MODEL_SELECTION', {})
    session = session or requests.Session()
    request_timeout = config.get('request_timeout', 30)

    storage = ObjectStorageClient(
        storage_zone=getattr(settings, 'BUNNY_STORAGE_ZONE', ''),
        access_key=getattr(settings, 'BUNNY_ACCESS_KEY', ''),
        pull_zone=getattr(settings, 'BUNNY_PULL_ZONE', ''),
        session=session,
        timeout=request_timeout,
    )
    image_transfer = ImageTransferAdapter(storage)
    fashn = FashnClient(
        api_key=getattr(settings, 'FASHN_AI_API_KEY', ''),
        base_url=config.get('base_url', DEFAULT_BASE_URL),
        model_name=config.get('model_name', DEFAULT_MODEL_NAME),
        session=session,
        timeout=request_timeout,
    )
    background_remover = RemoveBgClient(
        api_key=getattr(settings, 'REMOVE_BG_API_KEY', ''),
        url=config.get('remove_bg_url', DEFAULT_REMOVE_BG_URL),
        session=session,
        timeout=request_timeout,
    )
    orchestrator = TryOnOrchestrator(
        fashn,
        poll_interval=config.get('poll_interval_seconds', 4),
        max_attempts=config.get('max_poll_attempts', 15),
        timeout_seconds=config.get('timeout_seconds', 60),
    )
    catalog = FashionModelCatalog(selection_config.get('recent_usage_window_days'))
    recorder = OutcomeRecorder(catalog)
    pipeline = TryOnPipeline(
        catalog=catalog,
        image_transfer=image_transfer,
        orchestrator=orchestrator,
        recorder=recorder,
        background_remover=background_remover,
        provider_configured=fashn.is_configured(),
        default_model_images=config.get('default_model_images'),
        weights=ScoringWeights.from_config(selection_config.get('weights')),
    )

    if not fashn.is_configured():
        logger.warning("FASHN_AI_API_KEY not configured, virtual try-on will be skipped")

    return TryOnServices(
        storage=storage,
        image_transfer=image_transfer,
        fashn=fashn,
        background_remover=background_remover,
        orchestrator=orchestrator,
        catalog=catalog,
        recorder=recorder,
        pipeline=pipeline,
    )


def install_services(services):
    """Install the services container; returns the previously installed one."""
    global _services
    previous, _services = _services, services
    return previous


def get_services() -> TryOnServices:
    if _services is None:
        raise ImproperlyConfigured("Try-on services are not installed; is 'tryon' in INSTALLED_APPS?")
    return _services
