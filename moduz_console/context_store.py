from __future__ import annotations

import json
from pathlib import Path
from typing import Any


class ContextStore:
    """JSON file with the selected tenant and the last enabled sets seen per tenant.

    Survives restarts so the first render after launch has something to show;
    it is never treated as authoritative.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (ValueError, OSError):
            return {}
        return payload if isinstance(payload, dict) else {}

    def _write(self, payload: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True), encoding="utf-8")

    def selected_tenant_id(self, principal_id: str) -> str | None:
        payload = self.load()
        if payload.get("principal_id") != principal_id:
            return None
        value = payload.get("selected_tenant_id")
        return str(value) if value else None

    def save_selected_tenant(self, principal_id: str, tenant_id: str | None) -> None:
        payload = self.load()
        if payload.get("principal_id") != principal_id:
            payload = {"principal_id": principal_id}
        payload["selected_tenant_id"] = tenant_id
        self._write(payload)

    def enabled_keys(self, principal_id: str, tenant_id: str) -> frozenset[str] | None:
        payload = self.load()
        if payload.get("principal_id") != principal_id:
            return None
        keys = (payload.get("enabled_by_tenant") or {}).get(tenant_id)
        if not isinstance(keys, list):
            return None
        return frozenset(str(key) for key in keys)

    def save_enabled_keys(self, principal_id: str, tenant_id: str, enabled_keys) -> None:
        payload = self.load()
        if payload.get("principal_id") != principal_id:
            payload = {"principal_id": principal_id}
        by_tenant = dict(payload.get("enabled_by_tenant") or {})
        by_tenant[tenant_id] = sorted(enabled_keys)
        payload["enabled_by_tenant"] = by_tenant
        self._write(payload)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
