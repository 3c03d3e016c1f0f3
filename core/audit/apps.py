from django.apps import AppConfig


class AuditConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.audit"

    def ready(self):
        # register signals
        from . import signals  # noqa: F401
