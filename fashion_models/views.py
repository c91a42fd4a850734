"""
Views for the Fashion Model catalog
"""

import logging

from django_filters import FilterSet, CharFilter, BooleanFilter
from rest_framework import status
from rest_framework.pagination import PageNumberPagination
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import AllowAny, IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from fashion_models.exceptions import FashionModelNotFound
from fashion_models.models import FashionModel
from fashion_models.serializers import (
    FashionModelEventSerializer,
    FashionModelSerializer,
    FashionModelToggleSerializer,
    RecommendationQuerySerializer,
)
from tryon.exceptions import InvalidEncoding, StorageUploadError
from tryon.services.container import get_services

logger = logging.getLogger(__name__)


class FashionModelPagination(PageNumberPagination):
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 200


class FashionModelFilter(FilterSet):
    """Case-insensitive attribute filters plus a tag filter (comma-separated, any match)."""
    gender = CharFilter(field_name='gender', lookup_expr='iexact')
    body_type = CharFilter(field_name='body_type', lookup_expr='iexact')
    ethnicity = CharFilter(field_name='ethnicity', lookup_expr='iexact')
    category = CharFilter(field_name='category', lookup_expr='iexact')
    skin_tone = CharFilter(field_name='skin_tone', lookup_expr='iexact')
    active = BooleanFilter(field_name='is_active')
    featured = BooleanFilter(field_name='is_featured')
    tags = CharFilter(method='filter_tags')

    class Meta:
        model = FashionModel
        fields = ['gender', 'body_type', 'ethnicity', 'category', 'skin_tone', 'active', 'featured']

    def filter_tags(self, queryset, name, value):
        wanted = {tag.strip().lower() for tag in value.split(',') if tag.strip()}
        if not wanted:
            return queryset
        matching = [
            model.pk for model in queryset
            if wanted & {str(tag).lower() for tag in (model.tags or [])}
        ]
        return queryset.filter(pk__in=matching)


def _upload_model_image(image_file, prefix):
    """Upload an admin-provided image file; returns (url, remote_path)."""
    adapter = get_services().image_transfer
    image_file.seek(0)
    return adapter.upload_bytes(image_file.read(), namespace='fashion-models', prefix=prefix)


class FashionModelListView(APIView):
    """
    GET: list fashion models with optional filters.
    POST: create a fashion model (admin only), from an image file or URL.
    """
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def get_permissions(self):
        if self.request.method == 'POST':
            return [IsAdminUser()]
        return [AllowAny()]

    def get(self, request):
        queryset = FashionModel.objects.all().order_by('sort_order', '-created_at')
        filterset = FashionModelFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response({'success': False, 'error': filterset.errors}, status=status.HTTP_400_BAD_REQUEST)

        paginator = FashionModelPagination()
        page = paginator.paginate_queryset(filterset.qs, request)
        serializer = FashionModelSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    def post(self, request):
        serializer = FashionModelSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {'success': False, 'message': 'Validation failed', 'errors': serializer.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        image = serializer.validated_data.pop('image', None)
        extra = {}
        if image is not None:
            try:
                image_url, remote_path = _upload_model_image(image, prefix='fashion_model')
            except (InvalidEncoding, StorageUploadError) as e:
                logger.error("Failed to upload fashion model image: %s", e)
                return Response(
                    {'success': False, 'message': 'Failed to upload image to storage'},
                    status=status.HTTP_502_BAD_GATEWAY
                )
            extra = {'image_url': image_url, 'thumbnail_url': image_url, 'storage_reference': remote_path}

        fashion_model = serializer.save(**extra)
        logger.info("Created fashion model %s (%s)", fashion_model.pk, fashion_model.name)
        return Response(
            {'success': True, 'data': FashionModelSerializer(fashion_model).data},
            status=status.HTTP_201_CREATED
        )


class FashionModelRecommendedView(APIView):
    """Top-N fashion models for a garment type and gender, best first."""
    permission_classes = [AllowAny]

    def get(self, request):
        query = RecommendationQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return Response(
                {'success': False, 'message': 'garmentType and gender are required; limit must be within range',
                 'errors': query.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        models = get_services().catalog.recommend(
            query.validated_data['garmentType'],
            query.validated_data['gender'],
            limit=query.validated_data['limit'],
        )
        return Response({'success': True, 'data': FashionModelSerializer(models, many=True).data})


class FashionModelDetailView(APIView):
    """Retrieve, update or delete one fashion model. Writes are admin only."""
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def get_permissions(self):
        if self.request.method == 'GET':
            return [AllowAny()]
        return [IsAdminUser()]

    def _get_model(self, model_id):
        try:
            return get_services().catalog.get(model_id)
        except FashionModelNotFound:
            return None

    def get(self, request, model_id):
        fashion_model = self._get_model(model_id)
        if fashion_model is None:
            return Response({'success': False, 'message': 'Fashion model not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response({'success': True, 'data': FashionModelSerializer(fashion_model).data})

    def put(self, request, model_id):
        return self._update(request, model_id, partial=False)

    def patch(self, request, model_id):
        return self._update(request, model_id, partial=True)

    def _update(self, request, model_id, partial):
        fashion_model = self._get_model(model_id)
        if fashion_model is None:
            return Response({'success': False, 'message': 'Fashion model not found'}, status=status.HTTP_404_NOT_FOUND)

        serializer = FashionModelSerializer(fashion_model, data=request.data, partial=partial)
        if not serializer.is_valid():
            return Response(
                {'success': False, 'message': 'Validation failed', 'errors': serializer.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        image = serializer.validated_data.pop('image', None)
        extra = {}
        if image is not None:
            try:
                image_url, remote_path = _upload_model_image(image, prefix=f'fashion_model_{fashion_model.pk}')
            except (InvalidEncoding, StorageUploadError) as e:
                logger.error("Failed to upload fashion model image for %s: %s", model_id, e)
                return Response(
                    {'success': False, 'message': 'Failed to upload image to storage'},
                    status=status.HTTP_502_BAD_GATEWAY
                )
            extra = {'image_url': image_url, 'thumbnail_url': image_url, 'storage_reference': remote_path}

        fashion_model = serializer.save(**extra)
        return Response({'success': True, 'data': FashionModelSerializer(fashion_model).data})

    def delete(self, request, model_id):
        fashion_model = self._get_model(model_id)
        if fashion_model is None:
            return Response({'success': False, 'message': 'Fashion model not found'}, status=status.HTTP_404_NOT_FOUND)
        fashion_model.delete()
        logger.info("Deleted fashion model %s", model_id)
        return Response({'success': True, 'message': 'Fashion model deleted successfully'})


class FashionModelToggleView(APIView):
    """Activate or deactivate a fashion model (admin only)."""
    permission_classes = [IsAdminUser]

    def patch(self, request, model_id):
        serializer = FashionModelToggleSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {'success': False, 'message': 'Validation failed: is_active must be a boolean',
                 'errors': serializer.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        is_active = serializer.validated_data['is_active']
        try:
            fashion_model = get_services().catalog.get(model_id)
        except FashionModelNotFound:
            return Response({'success': False, 'message': 'Fashion model not found'}, status=status.HTTP_404_NOT_FOUND)

        fashion_model.is_active = is_active
        fashion_model.save(update_fields=['is_active', 'updated_at'])
        return Response({
            'success': True,
            'message': f"Fashion model {'activated' if is_active else 'deactivated'} successfully"
        })


class FashionModelEventView(APIView):
    """
    Track a client-side interaction with a fashion model (view, select,
    ai_process). A ``select`` also counts as a use of the model.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, model_id):
        serializer = FashionModelEventSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'success': False, 'errors': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

        catalog = get_services().catalog
        try:
            catalog.get(model_id, active_only=True)
        except FashionModelNotFound:
            return Response(
                {'success': False, 'message': 'Invalid or inactive fashion model'},
                status=status.HTTP_404_NOT_FOUND
            )

        event_type = serializer.validated_data['event_type']
        context = dict(serializer.validated_data.get('context') or {})
        context.setdefault('user_id', request.user.id)
        catalog.track_event(model_id, event_type, context)
        if event_type == 'select':
            catalog.record_usage(model_id)

        return Response({'success': True, 'message': 'Event recorded'}, status=status.HTTP_201_CREATED)
