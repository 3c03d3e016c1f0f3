import pytest

from core.companies.models import Company
from core.companies.repository import CompanyRepository


@pytest.mark.django_db
def test_repository_queries(service, context):
    acme = service.create(Company(name="Acme"), context)
    service.create(Company(name="Globex"), context)

    repo = CompanyRepository()
    assert repo.find(acme.id) == acme
    assert repo.find(999) is None
    assert repo.find_by_name("Globex").name == "Globex"
    assert repo.find_by_name("Initech") is None
    assert [c.name for c in repo.find_all()] == ["Acme", "Globex"]


@pytest.mark.django_db
def test_service_get_helpers(service, context):
    acme = service.create(Company(name="Acme", website="https://acme.example"), context)

    assert service.get(acme.id).website == "https://acme.example"
    assert service.get_by_name("Acme").id == acme.id
    assert len(service.get_all()) == 1


@pytest.mark.django_db
def test_update_touches_and_records(service, context):
    acme = service.create(Company(name="Acme"), context)
    before = acme.updated_at

    acme.website = "https://acme.example"
    updated = service.update(acme, context)

    assert updated.updated_at >= before
    last = list(service.history(acme.id))[-1]
    assert last.change_kind == "UPDATED"
    assert last.field_state["website"] == "https://acme.example"
    assert last.field_state["updated_at"] == updated.updated_at


@pytest.mark.django_db
def test_delete_by_entity_and_by_id(service, context):
    acme = service.create(Company(name="Acme"), context)
    globex = service.create(Company(name="Globex"), context)
    acme_id = acme.id

    service.delete(acme, context)
    service.delete(globex.id, context)

    assert service.get_all() == []
    assert [s.change_kind for s in service.history(acme_id)][-1] == "DELETED"
    assert [s.change_kind for s in service.history(globex.id)][-1] == "DELETED"


@pytest.mark.django_db
def test_delete_missing_id_raises(service, context):
    with pytest.raises(Company.DoesNotExist):
        service.delete(12345, context)


@pytest.mark.django_db
def test_history_survives_deletion(service, context):
    acme = service.create(Company(name="Acme"), context)
    acme_id = acme.id
    service.delete(acme, context)

    snap = service.as_of(acme_id, service.interceptor.snapshots.revisions_of("Company", acme_id)[0])
    assert snap.change_kind == "CREATED"
    assert snap.field_state["name"] == "Acme"
