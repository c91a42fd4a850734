"""
Models for Try-On App
"""

from django.conf import settings
from django.db import models


class TryonRequest(models.Model):
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('processing', 'Processing'),
        ('completed', 'Completed'),
        ('degraded', 'Degraded'),
        ('skipped', 'Skipped'),
        ('failed', 'Failed'),
        ('cancelled', 'Cancelled'),
    ]
    FINAL_STATUSES = ('completed', 'degraded', 'skipped', 'failed', 'cancelled')

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='tryon_requests')
    garment_image_url = models.URLField(max_length=500)
    garment_category = models.CharField(max_length=100, blank=True, default='')
    gender = models.CharField(max_length=20, default='unisex')
    remove_background = models.BooleanField(default=False)
    pinned_model = models.ForeignKey(
        'fashion_models.FashionModel',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='pinned_tryon_requests',
    )
    selected_model = models.ForeignKey(
        'fashion_models.FashionModel',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='tryon_requests',
        help_text="Fashion model the try-on ran against",
    )
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending', db_index=True)
    reason = models.CharField(max_length=50, blank=True, null=True, help_text="Why the try-on degraded or was skipped")
    processed_image_url = models.URLField(max_length=500, blank=True, null=True)
    message = models.TextField(blank=True, null=True)
    provider_job_id = models.CharField(max_length=255, blank=True, null=True)
    task_id = models.CharField(max_length=255, blank=True, null=True, help_text="Celery task ID for tracking")
    processing_time_ms = models.PositiveIntegerField(blank=True, null=True)
    error_message = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"TryonRequest #{self.id} | User: {self.user_id} | Status: {self.status}"

    @property
    def is_final(self):
        return self.status in self.FINAL_STATUSES
