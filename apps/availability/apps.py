import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class AvailabilityConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.availability"
    verbose_name = "Availability"

    engine = None

    def ready(self) -> None:
        from .engine import InventoryEngine

        self.engine = InventoryEngine.from_settings()
        logger.debug(f"Inventory engine ready on database '{self.engine.using}'")
