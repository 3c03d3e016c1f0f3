from django.contrib import admin

from core.audit.models import Revision


@admin.register(Revision)
class RevisionAdmin(admin.ModelAdmin):
    list_display = ("revision_id", "timestamp", "actor")
    search_fields = ("actor",)
    ordering = ("-revision_id",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
