from django.urls import path
from core.audit.api import revisions_list, revision_detail

urlpatterns = [
    path("revisions", revisions_list, name="revisions-list"),
    path("revisions/<int:revision_id>", revision_detail, name="revisions-detail"),
]
