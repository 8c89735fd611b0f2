from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class TenantOption:
    tenant_id: str
    tenant_name: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


@dataclass(frozen=True)
class ModuleSnapshot:
    tenant_id: str | None
    enabled_keys: frozenset[str]
    flags: dict[str, dict[str, Any]]
    authoritative: bool


@dataclass
class ConsoleState:
    principal_id: str | None = None
    email: str | None = None
    tenants: list[TenantOption] = field(default_factory=list)
    default_tenant_id: str | None = None
    selected_tenant_id: str | None = None
    flags: dict[str, dict[str, Any]] = field(default_factory=dict)
    enabled_keys: frozenset[str] = frozenset()
    # False while showing cached data that the server has not confirmed yet.
    authoritative: bool = False
    last_error_code: str | None = None

    def apply_context(self, payload: dict[str, Any]) -> None:
        principal = payload.get("principal") or {}
        self.principal_id = principal.get("id")
        self.email = principal.get("email")
        self.tenants = [
            TenantOption(
                tenant_id=str(item["tenant_id"]),
                tenant_name=str(item.get("tenant_name") or ""),
                role=str(item.get("role") or ""),
            )
            for item in payload.get("memberships", [])
        ]
        self.default_tenant_id = payload.get("default_tenant_id")

    def tenant(self, tenant_id: str | None) -> TenantOption | None:
        return next((item for item in self.tenants if item.tenant_id == tenant_id), None)

    def apply_provisional(self, tenant_id: str, enabled_keys) -> None:
        self.selected_tenant_id = tenant_id
        self.flags = {}
        self.enabled_keys = frozenset(enabled_keys or ())
        self.authoritative = False

    def apply_flags(self, tenant_id: str, flags: list[dict[str, Any]]) -> None:
        self.selected_tenant_id = tenant_id
        self.flags = {str(flag["module_key"]): dict(flag) for flag in flags}
        self.enabled_keys = frozenset(key for key, flag in self.flags.items() if flag.get("enabled"))
        self.authoritative = True

    def set_enabled(self, module_key: str, enabled: bool) -> None:
        flag = dict(self.flags.get(module_key) or {"module_key": module_key})
        flag["enabled"] = enabled
        self.flags[module_key] = flag
        keys = set(self.enabled_keys)
        if enabled:
            keys.add(module_key)
        else:
            keys.discard(module_key)
        self.enabled_keys = frozenset(keys)

    def snapshot(self) -> ModuleSnapshot:
        return ModuleSnapshot(
            tenant_id=self.selected_tenant_id,
            enabled_keys=self.enabled_keys,
            flags={key: dict(flag) for key, flag in self.flags.items()},
            authoritative=self.authoritative,
        )

    def restore(self, snapshot: ModuleSnapshot) -> None:
        self.selected_tenant_id = snapshot.tenant_id
        self.enabled_keys = snapshot.enabled_keys
        self.flags = {key: dict(flag) for key, flag in snapshot.flags.items()}
        self.authoritative = snapshot.authoritative

    def clear(self) -> None:
        self.principal_id = None
        self.email = None
        self.tenants = []
        self.default_tenant_id = None
        self.selected_tenant_id = None
        self.flags = {}
        self.enabled_keys = frozenset()
        self.authoritative = False
        self.last_error_code = None
