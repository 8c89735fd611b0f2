from __future__ import annotations

from moduz_console.exceptions import TransportError
from moduz_console.navigation import MODULE_NOT_ENABLED, MODULES_ROUTE, SAFE_ROUTE, NavigationGuard, resolve_module
from moduz_console.state import ModuleSnapshot


def _snapshot(*enabled: str, authoritative: bool = True) -> ModuleSnapshot:
    return ModuleSnapshot(
        tenant_id="tenant-1",
        enabled_keys=frozenset(enabled),
        flags={},
        authoritative=authoritative,
    )


def test_resolve_module_routes() -> None:
    assert resolve_module("/reports") is None
    assert resolve_module("/adm").module_key.value == "core"
    assert resolve_module("/adm/core/modulos").module_key.value == "core"
    assert resolve_module("/adm/docs/invoices/42?tab=lines").module_key.value == "docs"
    assert resolve_module("/adm/people/").module_key.value == "people"
    assert resolve_module("/adm/track/sheets").module_key.value == "track"
    assert resolve_module("/adm/payroll").module_key is None


def test_mandatory_and_outside_routes_are_always_allowed() -> None:
    guard = NavigationGuard(source=lambda: _snapshot())

    assert guard.check("/adm").allowed
    assert guard.check("/adm/core/modulos").allowed
    assert guard.check("/login").allowed


def test_enabled_module_is_allowed() -> None:
    guard = NavigationGuard(source=lambda: _snapshot("core", "docs"))

    decision = guard.check("/adm/docs/invoices")

    assert decision.allowed
    assert decision.module_key.value == "docs"


def test_disabled_module_redirects_to_module_settings_and_notifies() -> None:
    denials = []
    guard = NavigationGuard(source=lambda: _snapshot("core"))
    guard.add_listener(denials.append)

    decision = guard.check("/adm/docs")

    assert not decision.allowed
    assert decision.reason == MODULE_NOT_ENABLED
    assert decision.redirect_to == MODULES_ROUTE
    assert denials == [decision]


def test_unimplemented_and_unknown_modules_redirect_to_console_root() -> None:
    guard = NavigationGuard(source=lambda: _snapshot("core", "track"))

    track = guard.check("/adm/track")
    unknown = guard.check("/adm/payroll")

    assert (track.allowed, track.reason, track.redirect_to) == (False, "MODULE_NOT_IMPLEMENTED", SAFE_ROUTE)
    assert (unknown.allowed, unknown.reason, unknown.redirect_to) == (False, "MODULE_UNKNOWN", SAFE_ROUTE)


def test_provisional_state_is_reconciled_before_deciding() -> None:
    current = {"snapshot": _snapshot("core", "docs", authoritative=False)}
    calls = []

    def reconcile() -> None:
        calls.append(True)
        current["snapshot"] = _snapshot("core")

    guard = NavigationGuard(source=lambda: current["snapshot"], reconcile=reconcile)

    decision = guard.check("/adm/docs")

    assert calls == [True]
    assert not decision.allowed
    assert decision.reason == MODULE_NOT_ENABLED


def test_failed_reconcile_denies_provisionally_enabled_module() -> None:
    def reconcile() -> None:
        raise TransportError(
            code="TRANSPORT_ERROR", message="connection refused", details=None, trace_id="trace-down", status_code=0
        )

    guard = NavigationGuard(source=lambda: _snapshot("core", "docs", authoritative=False), reconcile=reconcile)

    decision = guard.check("/adm/docs")

    assert not decision.allowed
    assert decision.reason == "TRANSPORT_ERROR"
    assert decision.redirect_to == SAFE_ROUTE


def test_removed_listener_is_not_notified() -> None:
    denials = []
    guard = NavigationGuard(source=lambda: _snapshot("core"))
    guard.add_listener(denials.append)
    guard.remove_listener(denials.append)

    guard.check("/adm/docs")

    assert denials == []
