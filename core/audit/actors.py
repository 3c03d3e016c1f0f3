from __future__ import annotations

import logging
from typing import Protocol

from django.conf import settings

from core.audit.context import ExecutionContext

logger = logging.getLogger(__name__)

ACTOR_MAX_LENGTH = 255


class ActorResolver(Protocol):
    def resolve(self, context: ExecutionContext) -> str | None:
        ...


class StaticActorResolver:
    """
    Attributes every revision to one fixed identity.
    """

    def __init__(self, actor: str | None = None):
        self.actor = actor or getattr(settings, "AUDIT_STATIC_ACTOR", "admin")

    def resolve(self, context: ExecutionContext) -> str | None:
        return self.actor


class ContextUserActorResolver:
    """
    Explicit actor on the context wins (jobs, scripts); otherwise the
    authenticated user's username.
    """

    def resolve(self, context: ExecutionContext) -> str | None:
        if context.actor:
            return context.actor

        user = context.user
        if user is None or not getattr(user, "is_authenticated", False):
            return None
        return user.get_username()


def resolve_actor(resolver: ActorResolver, context: ExecutionContext, *, fallback: str) -> str:
    try:
        actor = resolver.resolve(context)
    except Exception:
        logger.warning(
            "actor resolver %s failed (request_id=%s); using %r",
            type(resolver).__name__,
            context.request_id,
            fallback,
            exc_info=True,
        )
        return fallback

    if not actor:
        return fallback
    return str(actor)[:ACTOR_MAX_LENGTH]
