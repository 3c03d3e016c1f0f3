from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ExecutionContext:
    """
    Who/what is performing a unit of work.

    Passed explicitly to the audit interceptor; nothing reads a global
    "current user".
    """

    user: Any = None
    actor: str | None = None
    request_id: str | None = None

    @classmethod
    def from_request(cls, request) -> "ExecutionContext":
        user = getattr(request, "user", None)
        if user is not None and not user.is_authenticated:
            user = None
        return cls(user=user, request_id=getattr(request, "request_id", None))

    @classmethod
    def system(cls, name: str = "system") -> "ExecutionContext":
        return cls(actor=name)
