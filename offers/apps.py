"""Offers app configuration and signal registration."""

from django.apps import AppConfig


class OffersConfig(AppConfig):
    """Django app config for offers; registers signal handlers."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'offers'

    def ready(self):
        import offers.signals  # ربط معاملة العربون بحالة العرض
