from __future__ import annotations

import argparse
import json

from app.moduz.db.seed import provision_tenant
from app.moduz.db import session


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a tenant, seed its modules and grant a first admin")
    parser.add_argument("name", help="Tenant display name")
    parser.add_argument("--admin-principal", required=True, help="Principal id (token sub) of the first admin")
    parser.add_argument("--admin-email", default=None)
    args = parser.parse_args(argv)

    db = session.SessionLocal()
    try:
        tenant, membership = provision_tenant(db, args.name, args.admin_principal, args.admin_email, actor="cli")
        print(
            json.dumps(
                {
                    "tenant_id": str(tenant.id),
                    "tenant_name": tenant.name,
                    "membership_id": str(membership.id),
                    "admin_principal_id": membership.principal_id,
                }
            )
        )
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
