"""Django app configuration for Storekeeper."""

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class StorekeeperConfig(AppConfig):
    """Configuration for Storekeeper app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "storekeeper"
    verbose_name = _("Stock & Checkout")
