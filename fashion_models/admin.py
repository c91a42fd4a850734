"""
Admin configuration for the Fashion Model catalog
"""

from django.contrib import admin
from fashion_models.models import FashionModel, FashionModelEvent


@admin.register(FashionModel)
class FashionModelAdmin(admin.ModelAdmin):
    list_display = [
        'name',
        'gender',
        'category',
        'body_type',
        'is_active',
        'is_featured',
        'sort_order',
        'usage',
        'recent_usage',
        'success_rate',
        'created_at',
    ]
    list_filter = ['gender', 'category', 'body_type', 'is_active', 'is_featured']
    search_fields = ['name', 'ethnicity', 'tags']
    list_editable = ['is_active', 'is_featured', 'sort_order']
    readonly_fields = [
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
    actions = ['activate', 'deactivate']

    def activate(self, request, queryset):
        updated = queryset.update(is_active=True)
        self.message_user(request, f"{updated} fashion model(s) activated")
    activate.short_description = "Activate selected fashion models"

    def deactivate(self, request, queryset):
        updated = queryset.update(is_active=False)
        self.message_user(request, f"{updated} fashion model(s) deactivated")
    deactivate.short_description = "Deactivate selected fashion models"


@admin.register(FashionModelEvent)
class FashionModelEventAdmin(admin.ModelAdmin):
    list_display = ['id', 'fashion_model', 'event_type', 'processing_time_ms', 'created_at']
    list_filter = ['event_type', 'created_at']
    search_fields = ['fashion_model__name']
    readonly_fields = ['created_at']
