from django.apps import AppConfig


class FashionModelsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'fashion_models'
    verbose_name = 'Fashion Models'
