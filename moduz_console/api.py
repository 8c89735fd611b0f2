from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

from moduz_console.http_client import HttpClient

TENANT_HEADER = "X-Tenant-ID"
TENANT_CONTEXT_KEY = "tenant"


@dataclass
class ModuzApi:
    http: HttpClient
    access_token: str

    def _headers(self, tenant_id: str | None = None) -> dict[str, str]:
        headers = {"Authorization": f"Bearer {self.access_token}"}
        if tenant_id:
            headers[TENANT_HEADER] = str(tenant_id)
        return headers

    def resolve_context(self) -> dict[str, Any]:
        return self.http.request("GET", "/moduz/context", headers=self._headers(), operation="context.resolve")

    def get_catalog(self) -> dict[str, Any]:
        return self.http.request("GET", "/moduz/modules/catalog", headers=self._headers(), operation="modules.catalog")

    def list_modules(self, tenant_id: str, *, context_version: int | None = None) -> list[dict[str, Any]]:
        payload = self.http.request(
            "GET",
            "/moduz/modules",
            headers=self._headers(tenant_id),
            operation="modules.list",
            context_key=TENANT_CONTEXT_KEY,
            context_version=context_version,
        )
        return list(payload.get("modules", []))

    def toggle_module(
        self,
        tenant_id: str,
        module_key: str,
        enabled: bool,
        *,
        context_version: int | None = None,
    ) -> dict[str, Any]:
        return self.http.request(
            "POST",
            "/moduz/modules/toggle",
            headers=self._headers(tenant_id),
            json_body={"module_key": module_key, "enabled": enabled},
            operation="modules.toggle",
            context_key=TENANT_CONTEXT_KEY,
            context_version=context_version,
        )

    def list_audit(self, tenant_id: str, *, limit: int | None = None, cursor: str | None = None) -> dict[str, Any]:
        params: dict[str, Any] = {}
        if limit is not None:
            params["limit"] = limit
        if cursor:
            params["cursor"] = cursor
        return self.http.request(
            "GET",
            "/moduz/audit",
            headers=self._headers(tenant_id),
            params=params or None,
            operation="audit.list",
        )

    def iter_audit(self, tenant_id: str, *, limit: int = 50) -> Iterator[dict[str, Any]]:
        cursor = None
        while True:
            page = self.list_audit(tenant_id, limit=limit, cursor=cursor)
            yield from page.get("events", [])
            cursor = page.get("next_cursor")
            if not cursor:
                return
