from dataclasses import dataclass

from fastapi import Request


@dataclass(frozen=True)
class Principal:
    id: str
    email: str | None = None


@dataclass(frozen=True)
class RequestContext:
    principal: Principal
    tenant_id: str
    trace_id: str


def trace_id_of(request: Request) -> str:
    return getattr(request.state, "trace_id", "")
