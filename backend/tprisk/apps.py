from django.apps import AppConfig


class TpriskConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'tprisk'
    verbose_name = 'Transfer pricing risk'
