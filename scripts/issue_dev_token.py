from __future__ import annotations

import argparse
from datetime import timedelta

from app.moduz.core.security import create_principal_token


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Mint a development bearer token for a principal id")
    parser.add_argument("principal_id")
    parser.add_argument("--email", default=None)
    parser.add_argument("--minutes", type=int, default=60)
    args = parser.parse_args(argv)

    print(create_principal_token(args.principal_id, args.email, expires_delta=timedelta(minutes=args.minutes)))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
