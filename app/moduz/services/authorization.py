"""Authorization gate.

Both checks read the membership row on every call. Nothing carried by the
request (token claims, headers, client-side role) can grant access, and no
decision is cached between requests, so a deactivation or downgrade takes
effect on the very next call.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from app.moduz.core.error_catalog import ErrorCatalog
from app.moduz.core.logging import log_json
from app.moduz.core.metrics import metrics
from app.moduz.core.result import Err, Ok, Result
from app.moduz.db.errors import storage_error
from app.moduz.db.models import Membership
from app.moduz.repos.memberships import MembershipRepository

logger = logging.getLogger(__name__)


class AuthorizationGate:
    def __init__(self, db):
        self.db = db
        self.repo = MembershipRepository(db)

    def _deny(self, error, principal_id: str, tenant_id) -> Err:
        metrics.increment_authz_denied(error.code)
        log_json(
            logger,
            {"event": "authz_denied", "code": error.code, "principal_id": principal_id, "tenant_id": tenant_id},
        )
        return Err(error)

    def assert_active_member(self, principal_id: str, tenant_id) -> Result[Membership]:
        try:
            membership = self.repo.get_for_principal(tenant_id, principal_id)
        except SQLAlchemyError as exc:
            self.db.rollback()
            return Err(storage_error(exc))
        if membership is None or not membership.is_active:
            return self._deny(ErrorCatalog.NO_MEMBERSHIP, principal_id, tenant_id)
        return Ok(membership)

    def assert_admin(self, principal_id: str, tenant_id) -> Result[Membership]:
        result = self.assert_active_member(principal_id, tenant_id)
        if isinstance(result, Err):
            return result
        if not result.value.is_admin:
            return self._deny(ErrorCatalog.NOT_ADMIN, principal_id, tenant_id)
        return result
