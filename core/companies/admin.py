from django.contrib import admin

from core.audit.context import ExecutionContext
from core.audit.utils import audited
from core.companies.models import Company


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ("name", "website", "created_at", "updated_at")
    search_fields = ("name",)
    fields = ("name", "website")

    # admin writes go through an audited unit attributed to the admin user

    def save_model(self, request, obj, form, change):
        with audited(ExecutionContext.from_request(request)):
            if change:
                obj.touch()
            super().save_model(request, obj, form, change)

    def delete_model(self, request, obj):
        with audited(ExecutionContext.from_request(request)):
            super().delete_model(request, obj)

    def delete_queryset(self, request, queryset):
        with audited(ExecutionContext.from_request(request)):
            for obj in queryset:
                obj.delete()
