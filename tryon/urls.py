"""
URL Configuration for Try-On App
"""

from django.urls import path
from .views import ai_test, background_remove, tryon_cancel, tryon_create, tryon_detail, tryon_list, tryon_status

urlpatterns = [
    path('tryon', tryon_create, name='tryon-create'),
    path('tryon/list', tryon_list, name='tryon-list'),
    path('tryon/<int:tryon_request_id>', tryon_detail, name='tryon-detail'),
    path('tryon/<int:tryon_request_id>/status', tryon_status, name='tryon-status'),
    path('tryon/<int:tryon_request_id>/cancel', tryon_cancel, name='tryon-cancel'),
    path('remove-background', background_remove, name='background-remove'),
    path('test', ai_test, name='ai-test'),
]
