from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter

from moduz_console.config import ConsoleConfig
from moduz_console.error_mapper import map_error
from moduz_console.exceptions import TransportError
from moduz_console.tracing import TRACE_HEADER, TraceContext


@dataclass
class LastOperation:
    operation: str
    duration_ms: int
    result: str
    trace_id: str | None


@dataclass
class HttpClient:
    """Thin ``requests`` wrapper: retries idempotent calls, propagates trace ids
    and drops responses that belong to a superseded context (a tenant switch
    that happened while the request was in flight).

    Responses are never cached here; module state must come from the server.
    """

    config: ConsoleConfig
    trace: TraceContext | None = None
    session: requests.Session | None = None
    last_operation: LastOperation | None = None
    _context_versions: dict[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.session is None:
            self.session = requests.Session()
            adapter = HTTPAdapter(
                pool_connections=self.config.max_connections,
                pool_maxsize=self.config.max_connections,
            )
            self.session.mount("http://", adapter)
            self.session.mount("https://", adapter)

    def _build_url(self, path: str) -> str:
        base = self.config.api_base_url.rstrip("/") + "/"
        return urljoin(base, path.lstrip("/"))

    def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        operation: str = "unknown",
        context_key: str | None = None,
        context_version: int | None = None,
    ) -> dict[str, Any] | list[Any] | None:
        request_headers = {"Accept": "application/json"}
        if headers:
            request_headers.update(headers)
        trace_context = self.trace or TraceContext()
        request_headers[TRACE_HEADER] = trace_context.ensure()

        normalized_method = method.upper()
        url = self._build_url(path)
        attempts = self.config.retries + 1 if normalized_method in {"GET", "HEAD"} else 1

        if context_key and context_version is None:
            context_version = self.get_context_version(context_key)
        started = time.monotonic()
        response: requests.Response | None = None
        for attempt in range(attempts):
            try:
                response = self.session.request(
                    method=normalized_method,
                    url=url,
                    headers=request_headers,
                    json=json_body,
                    params=params,
                    timeout=(self.config.connect_timeout_seconds, self.config.read_timeout_seconds),
                    verify=self.config.verify_ssl,
                )
            except requests.RequestException as exc:
                if attempt >= attempts - 1:
                    self._record_operation(operation, started, "error", trace_context.trace_id)
                    raise TransportError(
                        code="TRANSPORT_ERROR",
                        message=str(exc),
                        details={"type": type(exc).__name__},
                        trace_id=trace_context.trace_id,
                        status_code=0,
                    ) from exc
            else:
                if response.status_code < 500 or attempt >= attempts - 1:
                    break
            time.sleep(self.config.retry_backoff_seconds * (2**attempt))

        if context_key and self.get_context_version(context_key) != context_version:
            self._record_operation(operation, started, "cancelled", trace_context.trace_id)
            # The server may already have applied a write; keep its body for the caller.
            discarded = None
            if response.ok and response.content:
                try:
                    discarded = response.json()
                except json.JSONDecodeError:
                    discarded = {"message": response.text}
            raise TransportError(
                code="REQUEST_CANCELLED",
                message="Request cancelled due to context switch",
                details={"type": "context_switched", "context_key": context_key},
                trace_id=trace_context.trace_id,
                status_code=0,
                raw_payload=discarded,
            )

        trace_context.update_from_headers(response.headers)
        if response.ok:
            self._record_operation(operation, started, "success", trace_context.trace_id)
            if not response.content:
                return None
            return response.json()

        try:
            payload = response.json()
        except json.JSONDecodeError:
            payload = {"message": response.text}
        if isinstance(payload, dict):
            trace_context.update_from_payload(payload)
        self._record_operation(operation, started, "error", trace_context.trace_id)
        raise map_error(response.status_code, payload if isinstance(payload, dict) else None, trace_context.trace_id)

    def switch_context(self, context_key: str) -> int:
        new_version = self.get_context_version(context_key) + 1
        self._context_versions[context_key] = new_version
        return new_version

    def get_context_version(self, context_key: str) -> int:
        return self._context_versions.get(context_key, 0)

    def _record_operation(self, operation: str, started: float, result: str, trace_id: str | None) -> None:
        self.last_operation = LastOperation(
            operation=operation,
            duration_ms=int((time.monotonic() - started) * 1000),
            result=result,
            trace_id=trace_id,
        )
