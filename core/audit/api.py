from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.audit.errors import NotFound
from core.audit.serializers import RevisionSerializer, SnapshotSerializer
from core.audit.utils import get_interceptor


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def revisions_list(request):
    """
    GET /v1/revisions

    Query:
      limit=<int optional, default 50, max 200>
      offset=<int optional, default 0>
    """
    try:
        limit = int(request.query_params.get("limit") or 50)
    except Exception:
        limit = 50
    limit = max(1, min(200, limit))

    try:
        offset = int(request.query_params.get("offset") or 0)
    except Exception:
        offset = 0
    offset = max(0, offset)

    revisions = get_interceptor().revisions
    items = revisions.recent(limit=limit, offset=offset)

    return Response({
        "items": RevisionSerializer(items, many=True).data,
        "page": {"limit": limit, "offset": offset, "total": revisions.count()},
    })


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def revision_detail(request, revision_id: int):
    """
    GET /v1/revisions/{revision_id}
    Revision metadata plus every snapshot it wrote.
    """
    interceptor = get_interceptor()
    try:
        revision = interceptor.revisions.get(revision_id)
    except NotFound:
        return Response({"error": {"code": "NOT_FOUND", "message": "Revision not found"}}, status=404)

    changes = interceptor.snapshots.changes_in(revision_id)
    return Response({
        "revision": RevisionSerializer(revision).data,
        "changes": SnapshotSerializer(changes, many=True).data,
    })
