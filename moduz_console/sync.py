from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from moduz_catalog.modules import check_toggle, parse_module_key
from moduz_console.api import TENANT_CONTEXT_KEY, ModuzApi
from moduz_console.context_store import ContextStore
from moduz_console.exceptions import ApiError, GuardrailError, TenantNotAllowedError
from moduz_console.logger import get_logger, log_action
from moduz_console.module_cache import ModuleCache
from moduz_console.navigation import NavigationGuard
from moduz_console.state import ConsoleState, ModuleSnapshot

logger = get_logger("moduz_console.sync")

RenderListener = Callable[[ModuleSnapshot], None]


@dataclass(frozen=True)
class SwitchResult:
    tenant_id: str
    provisional_keys: frozenset[str] | None
    enabled_keys: frozenset[str]

    @property
    def changed(self) -> bool:
        """True when the provisional render had to be replaced."""
        return self.provisional_keys is not None and self.provisional_keys != self.enabled_keys


@dataclass(frozen=True)
class ToggleResult:
    module: dict[str, Any]
    audit_recorded: bool
    audit_error: str | None


class ModuleSync:
    """Keeps the console's view of enabled modules consistent with the server.

    The local cache and the persisted context only seed provisional renders;
    every tenant switch ends with a fresh server listing that replaces them.
    """

    def __init__(
        self,
        api: ModuzApi,
        state: ConsoleState | None = None,
        cache: ModuleCache | None = None,
        store: ContextStore | None = None,
    ) -> None:
        self.api = api
        self.state = state or ConsoleState()
        self.cache = cache or ModuleCache()
        self.store = store
        self._render_listeners: list[RenderListener] = []

    def on_render(self, listener: RenderListener) -> None:
        self._render_listeners.append(listener)

    def _render(self) -> None:
        snapshot = self.state.snapshot()
        for listener in list(self._render_listeners):
            listener(snapshot)

    def load_context(self) -> SwitchResult | None:
        """Resolve memberships and open the preferred tenant.

        Preference: the stored tenant if still allowed, else the server default,
        else the first membership.
        """
        self.state.apply_context(self.api.resolve_context())
        if not self.state.tenants:
            self.state.apply_provisional(None, ())
            self.state.authoritative = True
            self._render()
            return None
        stored = self.store.selected_tenant_id(self.state.principal_id) if self.store else None
        candidates = [stored, self.state.default_tenant_id, self.state.tenants[0].tenant_id]
        chosen = next(candidate for candidate in candidates if candidate and self.state.tenant(candidate))
        return self.switch_tenant(chosen)

    def _cached_keys(self, tenant_id: str) -> frozenset[str] | None:
        cached = self.cache.get(tenant_id)
        if cached is None and self.store is not None and self.state.principal_id:
            cached = self.store.enabled_keys(self.state.principal_id, tenant_id)
        return cached

    def switch_tenant(self, tenant_id: str) -> SwitchResult:
        tenant_id = str(tenant_id)
        if self.state.tenant(tenant_id) is None:
            raise TenantNotAllowedError(
                code="NO_MEMBERSHIP",
                message="Tenant is not among the principal's memberships",
                details={"tenant_id": tenant_id},
                trace_id=None,
                status_code=0,
            )
        version = self.api.http.switch_context(TENANT_CONTEXT_KEY)
        provisional = self._cached_keys(tenant_id)
        self.state.apply_provisional(tenant_id, provisional)
        if provisional is not None:
            self._render()

        flags = self.api.list_modules(tenant_id, context_version=version)
        self._adopt(tenant_id, flags)
        if self.store is not None:
            self.store.save_selected_tenant(self.state.principal_id, tenant_id)
        result = SwitchResult(tenant_id=tenant_id, provisional_keys=provisional, enabled_keys=self.state.enabled_keys)
        log_action(
            logger,
            "tenant.switch",
            tenant_id,
            self.api.http.last_operation.trace_id if self.api.http.last_operation else None,
            "success",
            reconciled=result.changed,
        )
        return result

    def refresh(self) -> ModuleSnapshot:
        tenant_id = self.state.selected_tenant_id
        if tenant_id is None:
            return self.state.snapshot()
        version = self.api.http.get_context_version(TENANT_CONTEXT_KEY)
        self._adopt(tenant_id, self.api.list_modules(tenant_id, context_version=version))
        return self.state.snapshot()

    def _adopt(self, tenant_id: str, flags: list[dict[str, Any]]) -> None:
        self.state.apply_flags(tenant_id, flags)
        self.cache.set(tenant_id, self.state.enabled_keys)
        if self.store is not None and self.state.principal_id:
            self.store.save_enabled_keys(self.state.principal_id, tenant_id, self.state.enabled_keys)
        self._render()

    def toggle(self, module_key: str, enabled: bool) -> ToggleResult:
        tenant_id = self.state.selected_tenant_id
        if tenant_id is None:
            raise TenantNotAllowedError(
                code="NO_TENANT_SELECTED",
                message="Select a tenant before toggling modules",
                details={"module_key": module_key},
                trace_id=None,
                status_code=0,
            )
        rejection = check_toggle(module_key, enabled)
        if rejection is not None:
            self.state.last_error_code = rejection
            log_action(logger, "module.toggle", tenant_id, None, "rejected", module_key=module_key, code=rejection)
            raise GuardrailError(
                code=rejection,
                message="Toggle rejected by module guardrails",
                details={"module_key": module_key, "enabled": enabled},
                trace_id=None,
                status_code=0,
            )

        key = parse_module_key(module_key).value
        before = self.state.snapshot()
        version = self.api.http.get_context_version(TENANT_CONTEXT_KEY)
        self.state.set_enabled(key, enabled)
        self._render()
        try:
            payload = self.api.toggle_module(tenant_id, key, enabled, context_version=version)
        except ApiError as exc:
            committed = exc.raw_payload if exc.code == "REQUEST_CANCELLED" and isinstance(exc.raw_payload, dict) else None
            if committed and "module" in committed:
                # Applied on the server for the tenant we already left; only its cache is stale now.
                self.cache.invalidate(tenant_id)
                log_action(
                    logger,
                    "module.toggle",
                    tenant_id,
                    committed.get("trace_id") or exc.trace_id,
                    "committed_after_switch",
                    module_key=key,
                    enabled=committed["module"].get("enabled"),
                    audit_recorded=committed.get("audit_recorded"),
                    audit_error=committed.get("audit_error"),
                )
            # A tenant switch during the call already replaced the state; leave it alone.
            if self.api.http.get_context_version(TENANT_CONTEXT_KEY) == version:
                self.state.restore(before)
                self._render()
            self.state.last_error_code = exc.code
            log_action(logger, "module.toggle", tenant_id, exc.trace_id, "rolled_back", module_key=key, code=exc.code)
            raise

        module = payload["module"]
        self.state.flags[key] = dict(module)
        self.state.set_enabled(key, bool(module.get("enabled")))
        self.state.last_error_code = None
        self.cache.set(tenant_id, self.state.enabled_keys)
        if self.store is not None and self.state.principal_id:
            self.store.save_enabled_keys(self.state.principal_id, tenant_id, self.state.enabled_keys)
        self._render()
        log_action(
            logger,
            "module.toggle",
            tenant_id,
            payload.get("trace_id"),
            "success",
            module_key=key,
            audit_recorded=payload.get("audit_recorded"),
        )
        return ToggleResult(
            module=module,
            audit_recorded=bool(payload.get("audit_recorded")),
            audit_error=payload.get("audit_error"),
        )

    def sign_out(self) -> None:
        """Forget everything cached for the current principal."""
        self.api.http.switch_context(TENANT_CONTEXT_KEY)
        log_action(logger, "session.sign_out", self.state.selected_tenant_id, None, "success")
        self.state.clear()
        self.cache.clear()
        if self.store is not None:
            self.store.clear()
        self._render()

    def guard(self) -> NavigationGuard:
        return NavigationGuard(source=self.state.snapshot, reconcile=self.refresh)
