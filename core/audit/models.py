from django.db import models

from core.audit.errors import AppendOnlyViolation


class ChangeKind(models.TextChoices):
    CREATED = "CREATED", "Created"
    UPDATED = "UPDATED", "Updated"
    DELETED = "DELETED", "Deleted"


class AppendOnlyModel(models.Model):
    """
    Rows are written once. Updates and deletes through the model are refused.
    """

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise AppendOnlyViolation(f"{type(self).__name__} rows are append-only; updates are not allowed")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise AppendOnlyViolation(f"{type(self).__name__} rows are append-only; deletions are not allowed")


class Revision(AppendOnlyModel):
    # assigned by RevisionClock, never by the table
    revision_id = models.BigIntegerField(primary_key=True)
    timestamp = models.DateTimeField(db_index=True)
    actor = models.CharField(max_length=255)

    class Meta:
        db_table = "revinfo"
        ordering = ["revision_id"]

    def __str__(self) -> str:
        return f"r{self.revision_id} by {self.actor} at {self.timestamp}"


class RevisionSequence(models.Model):
    """
    Identity column the clock draws revision numbers from.
    Rows are deleted right after allocation; the counter never rewinds.
    """

    id = models.BigAutoField(primary_key=True)

    class Meta:
        db_table = "revinfo_seq"
