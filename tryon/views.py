"""
Django REST Framework Views for Try-On App
"""

import logging

from celery.result import AsyncResult
from django.conf import settings
from django_filters import CharFilter, FilterSet
from django_ratelimit.core import is_ratelimited
from rest_framework import status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from fashion_models.exceptions import FashionModelNotFound
from thrift_studio.websocket_utils import send_tryon_status_update

from .exceptions import BackgroundRemovalError, InvalidEncoding, StorageUploadError
from .models import TryonRequest
from .serializers import BackgroundRemovalSerializer, TryonCreateSerializer, TryonRequestSerializer
from .services.container import get_services

logger = logging.getLogger(__name__)


class TryonRequestPagination(PageNumberPagination):
    """Pagination class for TryonRequest list."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class TryonRequestFilter(FilterSet):
    """FilterSet for TryonRequest with inline filtering."""
    garment_category = CharFilter(field_name='garment_category', lookup_expr='icontains')

    class Meta:
        model = TryonRequest
        fields = ['status', 'reason', 'garment_category']


def _tryon_rate_limit():
    return getattr(settings, 'TRYON_CONFIG', {}).get('rate_limit', '20/h')


def _host_garment_image(validated_data):
    """Return a fetchable URL for the submitted garment, uploading inline payloads and files."""
    adapter = get_services().image_transfer
    garment_file = validated_data.get('garment_image')
    if garment_file is not None:
        garment_file.seek(0)
        url, _ = adapter.upload_bytes(garment_file.read(), namespace='tryon/garments', prefix='garment')
        return url
    return adapter.ensure_url(validated_data['garmentImage'], namespace='tryon/garments', prefix='garment')


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([JSONParser, MultiPartParser, FormParser])
def tryon_create(request):
    """
    Queue a virtual try-on.

    Accepts:
    - garmentImage: garment image URL or data:image/...;base64 payload
      (or a ``garment_image`` file upload)
    - garmentCategory: free-text garment label, e.g. "Evening Gown"
    - gender: men / women / unisex (female / male accepted)
    - modelId: optional fashion model id that bypasses automatic selection
    - removeBackground: remove the garment background before try-on

    Returns 202 with the request id and task id; poll
    ``/api/ai/tryon/<id>/status`` or listen on ``ws/user/<id>/``.
    """
    user = request.user

    if is_ratelimited(request=request, group='tryon', key='user', rate=_tryon_rate_limit(),
                      method='POST', increment=True):
        logger.warning("Try-on rate limit exceeded for user=%s (ID: %d)", user.username, user.id)
        return Response(
            {'error': 'Rate limit exceeded', 'message': 'Too many try-on requests. Please try again later.'},
            status=status.HTTP_429_TOO_MANY_REQUESTS
        )

    serializer = TryonCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'error': 'Invalid try-on request', 'details': serializer.errors},
                        status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    pinned_model = None
    if data.get('modelId'):
        try:
            pinned_model = get_services().catalog.get(data['modelId'], active_only=True)
        except FashionModelNotFound:
            return Response({'error': 'Invalid or inactive fashion model'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        garment_image_url = _host_garment_image(data)
    except InvalidEncoding as e:
        logger.warning("Rejected try-on garment image for user=%s: %s", user.username, e)
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except StorageUploadError as e:
        logger.error("Failed to upload garment image: %s", e, exc_info=True)
        return Response({'error': 'Failed to upload garment image to storage'},
                        status=status.HTTP_502_BAD_GATEWAY)

    tryon_request = TryonRequest.objects.create(
        user=user,
        garment_image_url=garment_image_url,
        garment_category=data.get('garmentCategory', ''),
        gender=data.get('gender', 'unisex'),
        remove_background=data.get('removeBackground', False),
        pinned_model=pinned_model,
    )
    logger.info(
        "TryonRequest saved -> ID: %d, User: %s, Category: %s, Pinned: %s",
        tryon_request.id, user.username, tryon_request.garment_category, pinned_model
    )
    send_tryon_status_update(user_id=user.id, tryon_request_id=tryon_request.id, status='pending')

    from .tasks import run_tryon_async
    try:
        task = run_tryon_async.delay(tryon_request.id)
    except Exception as e:
        logger.error("Failed to queue try-on task: %s", str(e), exc_info=True)
        tryon_request.status = 'failed'
        tryon_request.error_message = f'Failed to queue task: {str(e)}'
        tryon_request.save(update_fields=['status', 'error_message', 'updated_at'])
        return Response({'error': 'Failed to queue try-on task'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    TryonRequest.objects.filter(pk=tryon_request.pk).update(task_id=task.id)
    tryon_request.refresh_from_db()
    logger.info("Try-on task queued: request_id=%s, task_id=%s", tryon_request.id, task.id)

    return Response(
        {
            'success': True,
            'message': 'Try-on started',
            'id': tryon_request.id,
            'task_id': task.id,
            'status': tryon_request.status,
            'garment_image_url': garment_image_url,
        },
        status=status.HTTP_202_ACCEPTED
    )


def _get_own_request(request, tryon_request_id):
    try:
        return TryonRequest.objects.get(id=tryon_request_id, user=request.user)
    except TryonRequest.DoesNotExist:
        return None


def _not_found():
    return Response(
        {'error': 'Try-on request not found or does not belong to you'},
        status=status.HTTP_404_NOT_FOUND
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def tryon_status(request, tryon_request_id):
    """
    Poll a try-on request.

    Once the request is settled the response carries the try-on payload
    (``processedImageUrl``, ``message``, ``outcome``, ``reason``).
    """
    tryon_request = _get_own_request(request, tryon_request_id)
    if tryon_request is None:
        return _not_found()

    response_data = {
        'tryon_request_id': tryon_request.id,
        'task_id': tryon_request.task_id,
        'status': tryon_request.status,
    }

    if tryon_request.task_id and not tryon_request.is_final:
        task_result = AsyncResult(tryon_request.task_id)
        response_data['task_state'] = task_result.state
        # The worker died without settling the record.
        if task_result.state == 'FAILURE':
            error_msg = str(task_result.info) if task_result.info else 'Task failed'
            tryon_request.status = 'failed'
            tryon_request.error_message = error_msg[:500]
            tryon_request.save(update_fields=['status', 'error_message', 'updated_at'])
            logger.warning("Marked try-on request %s failed after task %s failure", tryon_request.id, tryon_request.task_id)
            response_data['status'] = 'failed'

    if tryon_request.status in ('completed', 'degraded', 'skipped', 'cancelled'):
        response_data.update({
            'success': True,
            'processedImageUrl': tryon_request.processed_image_url or tryon_request.garment_image_url,
            'message': tryon_request.message,
            'outcome': 'skipped' if tryon_request.status == 'cancelled' else tryon_request.status,
            'reason': tryon_request.reason,
        })
    elif tryon_request.status == 'failed':
        response_data['message'] = 'Try-on failed'
        response_data['error'] = tryon_request.error_message or 'Unknown error'
    else:
        response_data['message'] = 'Try-on is in progress'

    return Response(response_data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def tryon_cancel(request, tryon_request_id):
    """
    Stop waiting for a try-on. The worker stops polling at its next check;
    the provider-side job is left to finish on its own and is not counted.
    """
    tryon_request = _get_own_request(request, tryon_request_id)
    if tryon_request is None:
        return _not_found()

    if tryon_request.is_final:
        return Response(
            {'error': f'Try-on request already {tryon_request.status}', 'status': tryon_request.status},
            status=status.HTTP_409_CONFLICT
        )

    tryon_request.status = 'cancelled'
    tryon_request.reason = 'cancelled'
    tryon_request.processed_image_url = tryon_request.garment_image_url
    tryon_request.message = 'Virtual try-on was cancelled'
    tryon_request.save(update_fields=['status', 'reason', 'processed_image_url', 'message', 'updated_at'])
    logger.info("Try-on request %s cancelled by user=%s", tryon_request.id, request.user.username)

    send_tryon_status_update(
        user_id=request.user.id,
        tryon_request_id=tryon_request.id,
        status='cancelled',
        task_id=tryon_request.task_id,
        message=tryon_request.message,
    )
    return Response({'success': True, 'tryon_request_id': tryon_request.id, 'status': 'cancelled'})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def tryon_list(request):
    """
    Get list of try-on requests with filtering and pagination.

    Query Parameters:
    - status: Filter by status
    - reason: Filter by degradation/skip reason
    - garment_category: Substring match on the garment label
    - page, page_size: pagination (default 20, max 100)
    """
    queryset = TryonRequest.objects.filter(user=request.user).select_related('selected_model').order_by('-created_at')

    filterset = TryonRequestFilter(request.query_params, queryset=queryset)
    queryset = filterset.qs

    paginator = TryonRequestPagination()
    paginated_queryset = paginator.paginate_queryset(queryset, request)
    serializer = TryonRequestSerializer(paginated_queryset, many=True)
    return paginator.get_paginated_response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def tryon_detail(request, tryon_request_id):
    """Get a single try-on request by ID."""
    tryon_request = _get_own_request(request, tryon_request_id)
    if tryon_request is None:
        return _not_found()

    serializer = TryonRequestSerializer(tryon_request)
    return Response({'success': True, 'data': serializer.data}, status=status.HTTP_200_OK)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([JSONParser, MultiPartParser, FormParser])
def background_remove(request):
    """
    Remove the background of an image and host the result.

    Accepts:
    - image: image file upload (max 5MB)
    - image_url: fetchable image URL

    Returns the hosted PNG as ``processedImageUrl``.
    """
    services = get_services()
    remover = services.background_remover
    if not remover.is_configured():
        return Response(
            {'success': False, 'message': 'Remove.bg API key not configured'},
            status=status.HTTP_503_SERVICE_UNAVAILABLE
        )

    serializer = BackgroundRemovalSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(
            {'success': False, 'message': 'Invalid background removal request', 'errors': serializer.errors},
            status=status.HTTP_400_BAD_REQUEST
        )
    data = serializer.validated_data

    try:
        image_file = data.get('image')
        if image_file is not None:
            image_file.seek(0)
            processed = remover.remove_background_from_file(
                image_file.read(),
                filename=image_file.name,
                content_type=getattr(image_file, 'content_type', None) or 'application/octet-stream',
            )
            prefix = 'bg_removed'
        else:
            processed = remover.remove_background(data['image_url'])
            prefix = 'bg_removed_url'
    except BackgroundRemovalError as e:
        logger.error("Background removal failed for user=%s: %s", request.user.username, e)
        return Response(
            {'success': False, 'message': 'Background removal failed. Please try again.'},
            status=status.HTTP_502_BAD_GATEWAY
        )

    try:
        processed_url, _ = services.image_transfer.upload_bytes(
            processed, namespace='tryon/background-removed', prefix=prefix
        )
    except (InvalidEncoding, StorageUploadError) as e:
        logger.error("Failed to host background-removed image: %s", e, exc_info=True)
        return Response(
            {'success': False, 'message': 'Failed to upload processed image to storage'},
            status=status.HTTP_502_BAD_GATEWAY
        )

    logger.info("Background removed for user=%s -> %s", request.user.username, processed_url)
    return Response({
        'success': True,
        'processedImageUrl': processed_url,
        'message': 'Background removed successfully',
    })



@api_view(['GET'])
@permission_classes([AllowAny])
def ai_test(request):
    """Report which AI providers are configured."""
    services = get_services()
    return Response({
        'status': 'ok',
        'fashnConfigured': services.fashn.is_configured(),
        'removeBgConfigured': services.background_remover.is_configured(),
        'storageConfigured': services.storage.is_configured(),
        'message': 'AI processing endpoints are ready',
    })
