from __future__ import annotations

from django.core.signals import setting_changed
from django.db.models.signals import post_delete, post_save, pre_delete, pre_save
from django.dispatch import receiver

from core.audit.history import is_tracked
from core.audit.models import ChangeKind
from core.audit.utils import get_interceptor


@receiver(pre_save)
def guard_tracked_save(sender, instance, raw=False, using=None, **kwargs):
    # fixture loading is not audited
    if raw or not is_tracked(sender):
        return
    get_interceptor().before_save(instance, using=using)


@receiver(post_save)
def on_tracked_saved(sender, instance, created: bool, raw=False, using=None, **kwargs):
    if raw or not is_tracked(sender):
        return
    get_interceptor().record(
        instance,
        ChangeKind.CREATED if created else ChangeKind.UPDATED,
        using=using,
    )


@receiver(pre_delete)
def guard_tracked_delete(sender, instance, using=None, **kwargs):
    if not is_tracked(sender):
        return
    get_interceptor().before_delete(instance, using=using)


@receiver(post_delete)
def on_tracked_deleted(sender, instance, using=None, **kwargs):
    if not is_tracked(sender):
        return
    get_interceptor().record(instance, ChangeKind.DELETED, using=using)


@receiver(setting_changed)
def reset_interceptor(sender, setting, **kwargs):
    if setting.startswith("AUDIT_"):
        get_interceptor.cache_clear()
