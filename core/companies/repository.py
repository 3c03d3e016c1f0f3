from __future__ import annotations

from core.companies.models import Company


class CompanyRepository:
    """
    Plain data access for companies. Knows nothing about history: callers
    that mutate are expected to run inside an audited unit of work.
    """

    def find(self, company_id) -> Company | None:
        return Company.objects.filter(id=company_id).first()

    def find_by_name(self, name: str) -> Company | None:
        return Company.objects.filter(name=name).first()

    def find_all(self) -> list[Company]:
        return list(Company.objects.all())

    def create(self, company: Company) -> None:
        company.save(force_insert=True)

    def update(self, company: Company) -> Company:
        company.touch()
        company.save()
        return company

    def delete(self, company: Company | int) -> None:
        if not isinstance(company, Company):
            company = Company.objects.get(id=company)
        company.delete()
