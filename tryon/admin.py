"""
Admin configuration for Try-On App
"""

from django.contrib import admin
from tryon.models import TryonRequest


@admin.register(TryonRequest)
class TryonRequestAdmin(admin.ModelAdmin):
    list_display = ['id', 'user_info', 'status', 'reason', 'garment_category', 'selected_model', 'processing_time_ms', 'created_at']
    list_filter = ['status', 'reason', 'created_at']
    search_fields = ['user__email', 'user__username', 'garment_category', 'provider_job_id', 'task_id']
    readonly_fields = ['created_at', 'updated_at', 'task_id', 'provider_job_id', 'processing_time_ms']
    raw_id_fields = ['pinned_model', 'selected_model']

    def user_info(self, obj):
        if obj.user:
            return f"{obj.user.id} - {obj.user.email}"
        return "Anonymous"
    user_info.short_description = "User Information"
