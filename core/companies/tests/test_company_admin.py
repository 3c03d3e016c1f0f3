import pytest
from django.contrib.auth import get_user_model
from django.test import Client

from core.companies.models import Company


@pytest.fixture
def admin_client_logged_in(db):
    admin = get_user_model().objects.create_superuser(username="root", email="root@acme.com", password="pass12345")
    client = Client()
    client.force_login(admin)
    return client


@pytest.mark.django_db
def test_admin_add_and_change_are_audited(admin_client_logged_in, service):
    r1 = admin_client_logged_in.post("/admin/companies/company/add/", {"name": "Acme", "website": ""})
    assert r1.status_code == 302

    acme = Company.objects.get(name="Acme")
    r2 = admin_client_logged_in.post(
        f"/admin/companies/company/{acme.id}/change/",
        {"name": "Acme Corp", "website": "https://acme.example"},
    )
    assert r2.status_code == 302

    history = list(service.history(acme.id))
    assert [s.change_kind for s in history] == ["CREATED", "UPDATED"]
    assert all(s.actor == "root" for s in history)


@pytest.mark.django_db
def test_admin_delete_is_audited(admin_client_logged_in, service, context):
    acme = service.create(Company(name="Acme"), context)

    resp = admin_client_logged_in.post(f"/admin/companies/company/{acme.id}/delete/", {"post": "yes"})
    assert resp.status_code == 302

    last = list(service.history(acme.id))[-1]
    assert last.change_kind == "DELETED"
    assert last.actor == "root"
