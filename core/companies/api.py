from django.utils import timezone
from django.utils.dateparse import parse_datetime
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.audit.context import ExecutionContext
from core.audit.errors import ClockUnavailable, NotFound, StoreUnavailable
from core.audit.serializers import SnapshotSerializer
from core.companies.models import Company
from core.companies.serializers import CompanySerializer
from core.companies.services import CompanyService


def _not_found(message="Company not found"):
    return Response({"error": {"code": "NOT_FOUND", "message": message}}, status=404)


def _audit_unavailable(exc):
    return Response({"error": {"code": "AUDIT_UNAVAILABLE", "message": str(exc)}}, status=503)


@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
def companies_list(request):
    """
    GET /v1/companies
    POST /v1/companies   Body: {"name": "...", "website": "..."}
    """
    service = CompanyService()

    if request.method == "GET":
        return Response({"items": CompanySerializer(service.get_all(), many=True).data})

    s = CompanySerializer(data=request.data)
    s.is_valid(raise_exception=True)

    try:
        company = service.create(Company(**s.validated_data), ExecutionContext.from_request(request))
    except (ClockUnavailable, StoreUnavailable) as exc:
        return _audit_unavailable(exc)

    return Response({"company": CompanySerializer(company).data}, status=201)


@api_view(["GET", "PATCH", "DELETE"])
@permission_classes([IsAuthenticated])
def companies_detail(request, company_id: int):
    """
    GET/PATCH/DELETE /v1/companies/{company_id}
    """
    service = CompanyService()

    company = service.get(company_id)
    if not company:
        return _not_found()

    if request.method == "GET":
        return Response({"company": CompanySerializer(company).data})

    context = ExecutionContext.from_request(request)

    try:
        if request.method == "DELETE":
            service.delete(company, context)
            return Response(status=204)

        s = CompanySerializer(company, data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        for attr, value in s.validated_data.items():
            setattr(company, attr, value)
        service.update(company, context)
    except (ClockUnavailable, StoreUnavailable) as exc:
        return _audit_unavailable(exc)

    return Response({"company": CompanySerializer(company).data})


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def company_history(request, company_id: int):
    """
    GET /v1/companies/{company_id}/history
    Works for deleted companies too.
    """
    history = CompanyService().history(company_id)
    items = SnapshotSerializer(list(history), many=True).data
    if not items:
        return _not_found("No history for this company")
    return Response({"items": items})


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def company_at_revision(request, company_id: int, revision_id: int):
    """
    GET /v1/companies/{company_id}/history/{revision_id}
    """
    try:
        snapshot = CompanyService().as_of(company_id, revision_id)
    except NotFound as exc:
        return _not_found(str(exc))
    return Response({"snapshot": SnapshotSerializer(snapshot).data})


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def company_as_of(request, company_id: int):
    """
    GET /v1/companies/{company_id}/as-of?at=<ISO datetime>
    """
    raw = request.query_params.get("at") or ""
    when = parse_datetime(raw)
    if when is None:
        return Response({"error": {"code": "INVALID_TIMESTAMP", "message": "at must be an ISO 8601 datetime"}}, status=400)
    if timezone.is_naive(when):
        when = timezone.make_aware(when)

    try:
        snapshot = CompanyService().as_of_time(company_id, when)
    except NotFound as exc:
        return _not_found(str(exc))
    return Response({"snapshot": SnapshotSerializer(snapshot).data})
