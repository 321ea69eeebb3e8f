from django.apps import AppConfig


class RatingsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.ratings"
    label = "ratings"
    verbose_name = "Ratings"

    def ready(self):
        from shared.application.message_bus import message_bus

        from .event_handlers import register_handlers

        register_handlers(message_bus)
