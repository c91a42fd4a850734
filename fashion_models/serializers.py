"""
Serializers for the Fashion Model catalog
"""

import json

from django.conf import settings
from rest_framework import serializers
from fashion_models.models import FashionModel, FashionModelEvent


class TagListField(serializers.ListField):
    """
    Accepts a JSON list, a JSON-encoded string, or a comma-separated string
    (multipart forms send tags as text).
    """
    child = serializers.CharField(max_length=50)

    def to_internal_value(self, data):
        if isinstance(data, list) and len(data) == 1 and isinstance(data[0], str):
            data = data[0]
        if isinstance(data, str):
            text = data.strip()
            if not text:
                data = []
            else:
                try:
                    parsed = json.loads(text)
                    data = parsed if isinstance(parsed, list) else [text]
                except ValueError:
                    data = [tag.strip() for tag in text.split(',') if tag.strip()]
        return super().to_internal_value(data)


class FashionModelSerializer(serializers.ModelSerializer):
    """Serializer for FashionModel. Telemetry is read-only."""
    tags = TagListField(required=False)
    image = serializers.ImageField(write_only=True, required=False)
    image_url = serializers.URLField(max_length=500, required=False)

    class Meta:
        model = FashionModel
        fields = [
            'id',
            'name',
            'gender',
            'body_type',
            'ethnicity',
            'age_range',
            'pose',
            'category',
            'height',
            'skin_tone',
            'hair_style',
            'tags',
            'image',
            'image_url',
            'thumbnail_url',
            'storage_reference',
            'has_transparent_background',
            'is_active',
            'is_featured',
            'sort_order',
            'usage',
            'recent_usage',
            'success_rate',
            'total_interactions',
            'tryon_attempts',
            'tryon_successes',
            'average_processing_ms',
            'last_used_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = [
            'id',
            'storage_reference',
            'usage',
            'recent_usage',
            'success_rate',
            'total_interactions',
            'tryon_attempts',
            'tryon_successes',
            'average_processing_ms',
            'last_used_at',
            'created_at',
            'updated_at',
        ]

    def validate_gender(self, value):
        return value.lower()

    def validate_category(self, value):
        return value.lower()

    def validate(self, attrs):
        if self.instance is None and not attrs.get('image') and not attrs.get('image_url'):
            raise serializers.ValidationError("Either image file or image_url is required")
        return attrs


class FashionModelToggleSerializer(serializers.Serializer):
    is_active = serializers.BooleanField(required=True)


class FashionModelEventSerializer(serializers.ModelSerializer):

    class Meta:
        model = FashionModelEvent
        fields = ['id', 'fashion_model', 'event_type', 'context', 'processing_time_ms', 'created_at']
        read_only_fields = ['id', 'fashion_model', 'processing_time_ms', 'created_at']

    def validate_event_type(self, value):
        if value in FashionModelEvent.TRYON_EVENTS:
            raise serializers.ValidationError("Try-on outcome events are recorded by the pipeline only")
        return value


class RecommendationQuerySerializer(serializers.Serializer):
    garmentType = serializers.CharField(required=True)
    gender = serializers.CharField(required=True)
    limit = serializers.IntegerField(required=False, default=3, min_value=1)

    def validate_limit(self, value):
        limit_max = getattr(settings, 'FASHION_MODEL_SELECTION', {}).get('recommendation_limit_max', 10)
        if value > limit_max:
            raise serializers.ValidationError(f"Ensure this value is less than or equal to {limit_max}.")
        return value
