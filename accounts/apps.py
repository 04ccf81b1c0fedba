"""Accounts app configuration."""

from django.apps import AppConfig


class AccountsConfig(AppConfig):
    """Django app config for users, auth and company profiles."""

    name = 'accounts'
    default_auto_field = 'django.db.models.BigAutoField'
