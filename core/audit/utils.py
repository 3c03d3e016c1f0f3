from __future__ import annotations

from functools import lru_cache

from django.conf import settings
from django.utils.module_loading import import_string

from core.audit.clock import RevisionClock
from core.audit.context import ExecutionContext
from core.audit.interceptor import AuditInterceptor
from core.audit.store import RevisionStore, SnapshotStore


@lru_cache(maxsize=1)
def get_interceptor() -> AuditInterceptor:
    resolver_class = import_string(getattr(settings, "AUDIT_ACTOR_RESOLVER", "core.audit.actors.ContextUserActorResolver"))
    return AuditInterceptor(
        clock=RevisionClock(),
        actor_resolver=resolver_class(),
        revisions=RevisionStore(),
        snapshots=SnapshotStore(),
        fallback_actor=getattr(settings, "AUDIT_FALLBACK_ACTOR", "system"),
    )


def audited(context: ExecutionContext | None = None):
    """
    with audited(ExecutionContext.from_request(request)):
        company.save()
    """
    return get_interceptor().unit_of_work(context)
