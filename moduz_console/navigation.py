from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from moduz_catalog.modules import (
    MODULE_NOT_IMPLEMENTED,
    MODULE_UNKNOWN,
    ModuleKey,
    descriptors,
    get_descriptor,
    mandatory_module_key,
    parse_module_key,
)
from moduz_console.exceptions import ApiError
from moduz_console.state import ModuleSnapshot

CONSOLE_ROOT = "/adm"
SAFE_ROUTE = "/adm"
MODULES_ROUTE = "/adm/core/modulos"
MODULE_NOT_ENABLED = "MODULE_NOT_ENABLED"


@dataclass(frozen=True)
class RouteModule:
    path: str
    module_key: ModuleKey | None
    segment: str | None


@dataclass(frozen=True)
class GuardDecision:
    path: str
    allowed: bool
    module_key: ModuleKey | None = None
    reason: str | None = None
    redirect_to: str | None = None


DenialListener = Callable[[GuardDecision], None]


def _normalize(path: str) -> str:
    path = (path or "").split("?", 1)[0].split("#", 1)[0].strip()
    if not path.startswith("/"):
        path = "/" + path
    return path.rstrip("/") or "/"


def _under(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")


def resolve_module(path: str) -> RouteModule | None:
    """Which catalog module owns ``path``; ``None`` for routes outside the console."""
    path = _normalize(path)
    if not _under(path, CONSOLE_ROOT):
        return None
    mandatory = mandatory_module_key()
    if path == CONSOLE_ROOT:
        return RouteModule(path=path, module_key=mandatory, segment=None)

    routed = [descriptor for descriptor in descriptors() if descriptor.route and _under(path, descriptor.route)]
    if routed:
        best = max(routed, key=lambda descriptor: len(descriptor.route))
        return RouteModule(path=path, module_key=best.key, segment=best.key.value)

    segment = path[len(CONSOLE_ROOT) + 1 :].split("/", 1)[0]
    return RouteModule(path=path, module_key=parse_module_key(segment), segment=segment)


class NavigationGuard:
    """Decides every navigation against the current enabled set.

    ``source`` returns the latest module snapshot. When it is provisional and a
    ``reconcile`` callable is given, the guard asks for a fresh server listing
    before deciding. A failed listing denies the navigation to the console root.
    """

    def __init__(
        self,
        source: Callable[[], ModuleSnapshot],
        reconcile: Callable[[], object] | None = None,
    ) -> None:
        self._source = source
        self._reconcile = reconcile
        self._listeners: list[DenialListener] = []

    def add_listener(self, listener: DenialListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: DenialListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def check(self, path: str) -> GuardDecision:
        route = resolve_module(path)
        if route is None:
            return GuardDecision(path=_normalize(path), allowed=True)
        if route.module_key is None:
            return self._deny(route, MODULE_UNKNOWN, SAFE_ROUTE)

        descriptor = get_descriptor(route.module_key)
        if descriptor.mandatory:
            return GuardDecision(path=route.path, allowed=True, module_key=route.module_key)
        if not descriptor.implemented:
            return self._deny(route, MODULE_NOT_IMPLEMENTED, SAFE_ROUTE)

        snapshot = self._source()
        if not snapshot.authoritative and self._reconcile is not None:
            try:
                self._reconcile()
            except ApiError as exc:
                # Cached sets never authorize a render on their own.
                return self._deny(route, exc.code, SAFE_ROUTE)
            snapshot = self._source()
        if route.module_key.value not in snapshot.enabled_keys:
            return self._deny(route, MODULE_NOT_ENABLED, MODULES_ROUTE)
        return GuardDecision(path=route.path, allowed=True, module_key=route.module_key)

    def _deny(self, route: RouteModule, reason: str, redirect_to: str) -> GuardDecision:
        decision = GuardDecision(
            path=route.path,
            allowed=False,
            module_key=route.module_key,
            reason=reason,
            redirect_to=redirect_to,
        )
        for listener in list(self._listeners):
            listener(decision)
        return decision
