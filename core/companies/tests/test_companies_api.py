from datetime import timedelta
from unittest import mock

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from core.audit.errors import StoreUnavailable
from core.companies.models import Company


@pytest.mark.django_db
def test_companies_require_auth():
    resp = APIClient().get("/v1/companies")
    assert resp.status_code in (401, 403)


@pytest.mark.django_db
def test_create_update_delete_with_history(api_client, user):
    r1 = api_client.post("/v1/companies", {"name": "Acme"}, format="json")
    assert r1.status_code == 201
    company_id = r1.json()["company"]["id"]

    r2 = api_client.patch(f"/v1/companies/{company_id}", {"name": "Acme Corp"}, format="json")
    assert r2.status_code == 200
    assert r2.json()["company"]["name"] == "Acme Corp"

    r3 = api_client.delete(f"/v1/companies/{company_id}")
    assert r3.status_code == 204
    assert api_client.get(f"/v1/companies/{company_id}").status_code == 404

    r4 = api_client.get(f"/v1/companies/{company_id}/history")
    assert r4.status_code == 200
    items = r4.json()["items"]
    assert [i["change_kind"] for i in items] == ["CREATED", "UPDATED", "DELETED"]
    assert [i["field_state"]["name"] for i in items] == ["Acme", "Acme Corp", "Acme Corp"]
    assert all(i["actor"] == user.username for i in items)

    rev2 = items[1]["revision_id"]
    r5 = api_client.get(f"/v1/companies/{company_id}/history/{rev2}")
    assert r5.status_code == 200
    assert r5.json()["snapshot"]["field_state"]["name"] == "Acme Corp"


@pytest.mark.django_db
def test_list_and_detail(api_client, service, context):
    acme = service.create(Company(name="Acme"), context)

    r1 = api_client.get("/v1/companies")
    assert r1.status_code == 200
    assert [c["name"] for c in r1.json()["items"]] == ["Acme"]

    r2 = api_client.get(f"/v1/companies/{acme.id}")
    assert r2.status_code == 200
    assert r2.json()["company"]["id"] == acme.id


@pytest.mark.django_db
def test_duplicate_name_is_rejected(api_client, service, context):
    service.create(Company(name="Acme"), context)

    resp = api_client.post("/v1/companies", {"name": "Acme"}, format="json")
    assert resp.status_code == 400
    assert Company.objects.count() == 1


@pytest.mark.django_db
def test_blank_name_is_rejected(api_client):
    resp = api_client.post("/v1/companies", {"name": "   "}, format="json")
    assert resp.status_code == 400


@pytest.mark.django_db
def test_audit_outage_returns_503_and_writes_nothing(api_client, interceptor):
    with mock.patch.object(interceptor.revisions, "insert", side_effect=StoreUnavailable("db read-only")):
        resp = api_client.post("/v1/companies", {"name": "Acme"}, format="json")

    assert resp.status_code == 503
    assert resp.json()["error"]["code"] == "AUDIT_UNAVAILABLE"
    assert not Company.objects.exists()


@pytest.mark.django_db
def test_history_not_found(api_client):
    resp = api_client.get("/v1/companies/999/history")
    assert resp.status_code == 404

    resp = api_client.get("/v1/companies/999/history/1")
    assert resp.status_code == 404


@pytest.mark.django_db
def test_as_of_time(api_client, service, context):
    acme = service.create(Company(name="Acme"), context)
    after_create = timezone.now()
    acme.name = "Acme Corp"
    service.update(acme, context)

    r1 = api_client.get(f"/v1/companies/{acme.id}/as-of", {"at": after_create.isoformat()})
    assert r1.status_code == 200
    assert r1.json()["snapshot"]["field_state"]["name"] == "Acme"

    before = (after_create - timedelta(days=1)).isoformat()
    r2 = api_client.get(f"/v1/companies/{acme.id}/as-of", {"at": before})
    assert r2.status_code == 404

    r3 = api_client.get(f"/v1/companies/{acme.id}/as-of", {"at": "yesterday"})
    assert r3.status_code == 400
    assert r3.json()["error"]["code"] == "INVALID_TIMESTAMP"


@pytest.mark.django_db
def test_request_id_is_echoed(api_client):
    resp = api_client.get("/v1/companies", HTTP_X_REQUEST_ID="abc-123")
    assert resp["X-Request-Id"] == "abc-123"
