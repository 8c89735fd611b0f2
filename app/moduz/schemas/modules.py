from datetime import datetime

from pydantic import BaseModel, Field

from moduz_catalog.modules import ModuleKey


class ModuleDescriptorOut(BaseModel):
    key: ModuleKey
    title: str
    description: str
    implemented: bool
    mandatory: bool
    route: str | None = None


class ModuleCatalogResponse(BaseModel):
    modules: list[ModuleDescriptorOut]
    mandatory_module: ModuleKey
    trace_id: str


class ModuleFlagOut(BaseModel):
    module_key: str
    enabled: bool
    enabled_at: datetime | None = None
    updated_at: datetime
    implemented: bool
    mandatory: bool


class ModuleListResponse(BaseModel):
    tenant_id: str
    modules: list[ModuleFlagOut]
    trace_id: str


class ModuleToggleRequest(BaseModel):
    # Free-form on purpose: unknown keys must reach the guardrails and come back as MODULE_UNKNOWN.
    module_key: str = Field(..., min_length=1, max_length=50)
    enabled: bool


class ModuleToggleResponse(BaseModel):
    module: ModuleFlagOut
    audit_recorded: bool
    audit_error: str | None = None
    trace_id: str
