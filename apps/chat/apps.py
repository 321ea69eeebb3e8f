from django.apps import AppConfig


class ChatConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.chat"
    label = "chat"
    verbose_name = "Chat"

    def ready(self):
        from shared.application.message_bus import message_bus

        from .event_handlers import register_handlers

        register_handlers(message_bus)
