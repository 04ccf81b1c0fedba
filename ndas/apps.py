from django.apps import AppConfig


class NdasConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'ndas'
