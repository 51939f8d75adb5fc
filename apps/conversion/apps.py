from django.apps import AppConfig


class ConversionConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.conversion'
    verbose_name = 'Format Conversion'
