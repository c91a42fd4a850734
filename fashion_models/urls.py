"""
URL Configuration for the Fashion Model catalog
"""

from django.urls import path
from fashion_models.views import (
    FashionModelDetailView,
    FashionModelEventView,
    FashionModelListView,
    FashionModelRecommendedView,
    FashionModelToggleView,
)

urlpatterns = [
    path('', FashionModelListView.as_view(), name='fashion-model-list'),
    path('recommended', FashionModelRecommendedView.as_view(), name='fashion-model-recommended'),
    path('<uuid:model_id>', FashionModelDetailView.as_view(), name='fashion-model-detail'),
    path('<uuid:model_id>/toggle', FashionModelToggleView.as_view(), name='fashion-model-toggle'),
    path('<uuid:model_id>/events', FashionModelEventView.as_view(), name='fashion-model-events'),
]
