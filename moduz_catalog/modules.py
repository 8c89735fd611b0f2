"""Static module catalog.

The catalog is code-defined and closed: every module a tenant can ever see is a
member of ``ModuleKey``. Changing it requires a deploy and a migration-free
re-seed (``ModuleFlagService.seed`` fills in missing rows lazily).

This module has no framework imports so the console package can evaluate the
same toggle guardrails locally.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ModuleKey(str, Enum):
    CORE = "core"
    DOCS = "docs"
    PEOPLE = "people"
    TRACK = "track"
    FINANCE = "finance"
    BIZZ = "bizz"
    STOCK = "stock"
    ASSETS = "assets"
    FLOW = "flow"


@dataclass(frozen=True)
class ModuleDescriptor:
    key: ModuleKey
    title: str
    description: str
    implemented: bool
    mandatory: bool = False
    default_enabled: bool = False
    route: str | None = None

    @property
    def seed_enabled(self) -> bool:
        return self.mandatory or (self.implemented and self.default_enabled)


_CATALOG: tuple[ModuleDescriptor, ...] = (
    ModuleDescriptor(
        ModuleKey.CORE,
        "Core",
        "Tenant settings, users, modules and audit.",
        implemented=True,
        mandatory=True,
        default_enabled=True,
        route="/adm/core",
    ),
    ModuleDescriptor(
        ModuleKey.DOCS,
        "Docs",
        "Document registry.",
        implemented=True,
        default_enabled=True,
        route="/adm/docs",
    ),
    ModuleDescriptor(
        ModuleKey.PEOPLE,
        "People",
        "Collaborators, teams and roles.",
        implemented=True,
        route="/adm/people",
    ),
    ModuleDescriptor(ModuleKey.TRACK, "Track", "Time tracking and attendance.", implemented=False),
    ModuleDescriptor(ModuleKey.FINANCE, "Finance", "Invoices, expenses and cash flow.", implemented=False),
    ModuleDescriptor(ModuleKey.BIZZ, "Bizz", "Clients, proposals and sales pipeline.", implemented=False),
    ModuleDescriptor(ModuleKey.STOCK, "Stock", "Inventory and stock movements.", implemented=False),
    ModuleDescriptor(ModuleKey.ASSETS, "Assets", "Equipment and asset lifecycle.", implemented=False),
    ModuleDescriptor(ModuleKey.FLOW, "Flow", "Tasks and internal workflows.", implemented=False),
)

_BY_KEY = {descriptor.key: descriptor for descriptor in _CATALOG}

# Guardrail outcome codes, shared with ErrorCatalog entries of the same name.
MODULE_UNKNOWN = "MODULE_UNKNOWN"
MANDATORY_MODULE_CANNOT_BE_DISABLED = "MANDATORY_MODULE_CANNOT_BE_DISABLED"
MODULE_NOT_IMPLEMENTED = "MODULE_NOT_IMPLEMENTED"


def descriptors() -> tuple[ModuleDescriptor, ...]:
    return _CATALOG


def catalog_keys() -> list[str]:
    return [descriptor.key.value for descriptor in _CATALOG]


def parse_module_key(raw: str | ModuleKey | None) -> ModuleKey | None:
    if isinstance(raw, ModuleKey):
        return raw
    if not raw:
        return None
    try:
        return ModuleKey(raw.strip().lower())
    except ValueError:
        return None


def get_descriptor(key: str | ModuleKey | None) -> ModuleDescriptor | None:
    module_key = parse_module_key(key)
    if module_key is None:
        return None
    return _BY_KEY.get(module_key)


def is_implemented(key: str | ModuleKey) -> bool:
    descriptor = get_descriptor(key)
    return bool(descriptor and descriptor.implemented)


def mandatory_module_key() -> ModuleKey:
    return next(descriptor.key for descriptor in _CATALOG if descriptor.mandatory)


def check_toggle(key: str | ModuleKey | None, desired_enabled: bool) -> str | None:
    """Return the guardrail code rejecting the transition, or ``None`` when allowed.

    Order matters: unknown first, then mandatory, then implemented.
    """
    descriptor = get_descriptor(key)
    if descriptor is None:
        return MODULE_UNKNOWN
    if descriptor.mandatory and not desired_enabled:
        return MANDATORY_MODULE_CANNOT_BE_DISABLED
    if desired_enabled and not descriptor.implemented:
        return MODULE_NOT_IMPLEMENTED
    return None


if sum(1 for descriptor in _CATALOG if descriptor.mandatory) != 1:
    raise RuntimeError("module catalog must declare exactly one mandatory module")
