from django.urls import path
from core.companies.api import (
    companies_list,
    companies_detail,
    company_history,
    company_at_revision,
    company_as_of,
)

urlpatterns = [
    path("companies", companies_list, name="companies-list"),
    path("companies/<int:company_id>", companies_detail, name="companies-detail"),
    path("companies/<int:company_id>/history", company_history, name="companies-history"),
    path("companies/<int:company_id>/history/<int:revision_id>", company_at_revision, name="companies-at-revision"),
    path("companies/<int:company_id>/as-of", company_as_of, name="companies-as-of"),
]
