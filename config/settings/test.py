from .base import *  # noqa

DEBUG = False
PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

AUDIT_ACTOR_RESOLVER = "core.audit.actors.ContextUserActorResolver"
AUDIT_FALLBACK_ACTOR = "system"
AUDIT_STATIC_ACTOR = "admin"

LOGGING["loggers"]["core"]["level"] = "DEBUG"  # noqa: F405
