"""
Models for the Fashion Model (mannequin) catalog
"""

import uuid

from django.db import models


class FashionModel(models.Model):
    """
    Stock model photo used as the target body for virtual try-on.

    Descriptive attributes and flags are maintained by admins; the telemetry
    fields are written only by the try-on pipeline through
    fashion_models.catalog.
    """
    GENDER_CHOICES = [
        ('men', 'Men'),
        ('women', 'Women'),
        ('unisex', 'Unisex'),
    ]
    CATEGORY_CHOICES = [
        ('general', 'General'),
        ('formal', 'Formal'),
        ('casual', 'Casual'),
        ('athletic', 'Athletic'),
        ('evening', 'Evening'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255, help_text="Descriptive name, e.g. 'Sophia - Professional Model'")

    gender = models.CharField(max_length=10, choices=GENDER_CHOICES, db_index=True)
    body_type = models.CharField(max_length=30, default='average', help_text="slim, average, athletic, plus_size")
    ethnicity = models.CharField(max_length=30, default='diverse')
    age_range = models.CharField(max_length=30, default='adult', help_text="young_adult, adult, mature")
    pose = models.CharField(max_length=30, default='front', help_text="front, side, three_quarter")
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default='general', db_index=True)
    height = models.PositiveIntegerField(null=True, blank=True, help_text="Height in cm")
    skin_tone = models.CharField(max_length=20, default='medium')
    hair_style = models.CharField(max_length=20, default='short')
    tags = models.JSONField(default=list, blank=True, help_text="Free-form searchable tags")

    image_url = models.URLField(max_length=500, help_text="Public URL of the model image")
    thumbnail_url = models.URLField(max_length=500, blank=True, null=True)
    storage_reference = models.CharField(
        max_length=500,
        blank=True,
        null=True,
        help_text="Remote path of the image in object storage"
    )
    has_transparent_background = models.BooleanField(default=False)

    is_active = models.BooleanField(default=True, db_index=True, help_text="Eligible for try-on selection")
    is_featured = models.BooleanField(default=False, help_text="Receives a selection bonus")
    sort_order = models.IntegerField(default=0, help_text="Lower sorts first")

    usage = models.PositiveIntegerField(default=0, help_text="Cumulative try-on usage")
    recent_usage = models.PositiveIntegerField(
        default=0,
        help_text="Try-on attempts within the trailing recent-usage window"
    )
    success_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=0,
        help_text="Percentage of try-on attempts that completed successfully"
    )
    total_interactions = models.PositiveIntegerField(default=0, help_text="Any tracked event")
    tryon_attempts = models.PositiveIntegerField(default=0)
    tryon_successes = models.PositiveIntegerField(default=0)
    average_processing_ms = models.PositiveIntegerField(default=0)
    last_used_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['sort_order', '-created_at']
        verbose_name = 'Fashion Model'
        verbose_name_plural = 'Fashion Models'

    def __str__(self):
        return f"{self.name} ({self.gender}, {self.category})"


class FashionModelEvent(models.Model):
    """Analytics event recorded against a fashion model."""
    EVENT_CHOICES = [
        ('view', 'View'),
        ('select', 'Select'),
        ('ai_process', 'AI Process'),
        ('tryon_success', 'Try-On Success'),
        ('tryon_failure', 'Try-On Failure'),
    ]
    TRYON_EVENTS = ('tryon_success', 'tryon_failure')

    fashion_model = models.ForeignKey(
        FashionModel,
        on_delete=models.CASCADE,
        related_name='events'
    )
    event_type = models.CharField(max_length=20, choices=EVENT_CHOICES, db_index=True)
    context = models.JSONField(default=dict, blank=True)
    processing_time_ms = models.PositiveIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Fashion Model Event'
        verbose_name_plural = 'Fashion Model Events'

    def __str__(self):
        return f"{self.event_type} | {self.fashion_model_id} | {self.created_at:%Y-%m-%d %H:%M}"
