import pytest
from rest_framework.test import APIClient

from core.companies.models import Company


@pytest.mark.django_db
def test_revisions_require_auth():
    resp = APIClient().get("/v1/revisions")
    assert resp.status_code in (401, 403)


@pytest.mark.django_db
def test_revisions_list_and_detail(api_client, service, context):
    acme = service.create(Company(name="Acme"), context)
    acme.name = "Acme Corp"
    service.update(acme, context)

    r1 = api_client.get("/v1/revisions")
    assert r1.status_code == 200
    body = r1.json()
    assert body["page"]["total"] == 2
    newest = body["items"][0]
    assert newest["actor"] == "alice"

    r2 = api_client.get(f"/v1/revisions/{newest['revision_id']}")
    assert r2.status_code == 200
    detail = r2.json()
    assert detail["revision"]["revision_id"] == newest["revision_id"]
    assert len(detail["changes"]) == 1
    change = detail["changes"][0]
    assert change["entity_type"] == "Company"
    assert change["entity_id"] == acme.id
    assert change["change_kind"] == "UPDATED"
    assert change["field_state"]["name"] == "Acme Corp"


@pytest.mark.django_db
def test_revision_detail_not_found(api_client):
    resp = api_client.get("/v1/revisions/424242")
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "NOT_FOUND"
