from __future__ import annotations

from datetime import datetime

from core.audit.context import ExecutionContext
from core.audit.interceptor import AuditInterceptor
from core.audit.store import SnapshotHistory
from core.audit.types import Snapshot
from core.audit.utils import get_interceptor
from core.companies.models import Company
from core.companies.repository import CompanyRepository

ENTITY_TYPE = "Company"


class CompanyService:
    def __init__(self, repository: CompanyRepository | None = None, interceptor: AuditInterceptor | None = None):
        self.repository = repository or CompanyRepository()
        self._interceptor = interceptor

    @property
    def interceptor(self) -> AuditInterceptor:
        return self._interceptor or get_interceptor()

    def get(self, company_id) -> Company | None:
        return self.repository.find(company_id)

    def get_by_name(self, name: str) -> Company | None:
        return self.repository.find_by_name(name)

    def get_all(self) -> list[Company]:
        return self.repository.find_all()

    def create(self, company: Company, context: ExecutionContext | None = None) -> Company:
        with self.interceptor.unit_of_work(context):
            self.repository.create(company)
        return company

    def update(self, company: Company, context: ExecutionContext | None = None) -> Company:
        with self.interceptor.unit_of_work(context):
            return self.repository.update(company)

    def delete(self, company: Company | int, context: ExecutionContext | None = None) -> None:
        with self.interceptor.unit_of_work(context):
            self.repository.delete(company)

    # history

    def history(self, company_id) -> SnapshotHistory:
        return self.interceptor.snapshots.history_of(ENTITY_TYPE, company_id)

    def as_of(self, company_id, revision_id: int) -> Snapshot:
        return self.interceptor.snapshots.as_of(ENTITY_TYPE, company_id, revision_id)

    def as_of_time(self, company_id, when: datetime) -> Snapshot:
        return self.interceptor.snapshots.as_of_time(ENTITY_TYPE, company_id, when)
