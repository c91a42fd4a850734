"""
Serializers for Try-On App
"""
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import URLValidator
from rest_framework import serializers

from fashion_models.selection import normalize_gender
from .models import TryonRequest


class TryonCreateSerializer(serializers.Serializer):
    """
    Input for a try-on request.

    The garment arrives either as ``garmentImage`` (URL or
    ``data:image/...;base64,`` payload) or as a ``garment_image`` file.
    """
    garmentImage = serializers.CharField(required=False, allow_blank=False, trim_whitespace=True)
    garment_image = serializers.ImageField(required=False)
    garmentCategory = serializers.CharField(required=False, allow_blank=True, default='', max_length=100)
    gender = serializers.CharField(required=False, default='unisex', max_length=20)
    modelId = serializers.UUIDField(required=False, allow_null=True, default=None)
    removeBackground = serializers.BooleanField(required=False, default=False)

    def validate_gender(self, value):
        return normalize_gender(value)

    def validate_garmentImage(self, value):
        if value.startswith('data:'):
            return value
        try:
            URLValidator(schemes=['http', 'https'])(value)
        except DjangoValidationError:
            raise serializers.ValidationError("garmentImage must be an http(s) URL or a data:image payload")
        return value

    def validate(self, attrs):
        if not attrs.get('garmentImage') and not attrs.get('garment_image'):
            raise serializers.ValidationError({'garmentImage': 'garmentImage or garment_image is required'})
        return attrs


class TryonRequestSerializer(serializers.ModelSerializer):
    """Read serializer for TryonRequest records."""
    processedImageUrl = serializers.URLField(source='processed_image_url', read_only=True)
    selected_model_name = serializers.CharField(source='selected_model.name', read_only=True, default=None)

    class Meta:
        model = TryonRequest
        fields = [
            'id', 'status', 'reason', 'message', 'processedImageUrl',
            'garment_image_url', 'garment_category', 'gender', 'remove_background',
            'pinned_model', 'selected_model', 'selected_model_name',
            'provider_job_id', 'task_id', 'processing_time_ms', 'error_message',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class BackgroundRemovalSerializer(serializers.Serializer):
    """Input for a standalone background removal: an ``image`` file or an ``image_url``."""
    MAX_UPLOAD_BYTES = 5 * 1024 * 1024

    image = serializers.ImageField(required=False)
    image_url = serializers.URLField(required=False, max_length=2000)

    def validate_image(self, value):
        if value.size > self.MAX_UPLOAD_BYTES:
            raise serializers.ValidationError("File size too large. Maximum size is 5MB.")
        return value

    def validate(self, attrs):
        if not attrs.get('image') and not attrs.get('image_url'):
            raise serializers.ValidationError("Please provide either a file or image URL.")
        return attrs
