from django.db import models
from django.utils import timezone

from core.audit.history import track


class Company(models.Model):
    id = models.BigAutoField(primary_key=True)
    name = models.CharField(max_length=255, unique=True)
    website = models.URLField(blank=True, default="")

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "companies"
        ordering = ["name"]
        verbose_name_plural = "companies"

    def __str__(self) -> str:
        return self.name

    def touch(self):
        self.updated_at = timezone.now()


# companies_aud: one row per (company, revision)
CompanyHistory = track(Company)
