from django.apps import AppConfig


class TryonConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'tryon'
    verbose_name = 'Virtual Try-On'

    def ready(self):
        from tryon.services.container import build_services, install_services
        install_services(build_services())
