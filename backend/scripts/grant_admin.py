#!/usr/bin/env python3
"""
Give an account the admin role (user_roles). Idempotent.
  python backend/scripts/grant_admin.py <auth-user-id>
"""
import sys
from pathlib import Path

backend_dir = Path(__file__).resolve().parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))


def main(argv: list[str]) -> int:
    if len(argv) != 2:
        print("usage: grant_admin.py <user_id>")
        return 2
    from ghostcoin.db.session import SessionLocal
    from ghostcoin.services.admin_service import grant_role

    db = SessionLocal()
    try:
        row = grant_role(db, argv[1].strip())
        print(f"OK  {row.user_id} is {row.role}")
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
