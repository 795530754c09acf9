"""Create a user (any role) directly in the database.

Usage:
  python scripts/create_user.py --email creator@example.com --password '...' --role CREATOR --print-token

Intended for local/dev seeding; self-service registration always yields SUBSCRIBER.
"""

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from creatorhub.core.config import get_database_url
from creatorhub.core.database import Database
from creatorhub.core.errors import ConflictError
from creatorhub.core.security import create_access_token
from creatorhub.features.users.service import create_user
from creatorhub.models.user import Role


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--email", required=True)
    ap.add_argument("--password", required=True)
    ap.add_argument("--role", choices=[r.value for r in Role], default=Role.SUBSCRIBER.value)
    ap.add_argument("--display-name", default=None)
    ap.add_argument("--print-token", action="store_true", help="also print a signed access token")
    args = ap.parse_args()

    db = Database(get_database_url()).open()
    try:
        db.create_all()
        user = create_user(db, args.email, args.password, role=Role(args.role), display_name=args.display_name)
    except ConflictError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(1)
    finally:
        db.close()

    print("Created user:")
    print(user.model_dump_json(by_alias=True, indent=2))
    if args.print_token:
        print("Access token:")
        print(create_access_token(user.identity()))


if __name__ == "__main__":
    main()
