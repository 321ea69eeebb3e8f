from django.apps import AppConfig


class BookingsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.bookings"
    label = "bookings"
    verbose_name = "Bookings"

    def ready(self):
        from shared.application.message_bus import message_bus

        from .application import command_handlers, event_handlers

        command_handlers.register_handlers(message_bus)
        event_handlers.register_handlers(message_bus)
