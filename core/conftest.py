import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from core.audit.context import ExecutionContext
from core.audit.utils import get_interceptor
from core.companies.services import CompanyService

User = get_user_model()


@pytest.fixture
def user(db):
    return User.objects.create_user(username="alice", email="alice@acme.com", password="pass12345")


@pytest.fixture
def api_client(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def context(user):
    return ExecutionContext(user=user, request_id="req-test")


@pytest.fixture
def interceptor(db):
    return get_interceptor()


@pytest.fixture
def service(db):
    return CompanyService()
