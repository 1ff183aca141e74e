"""
Grant or revoke the admin role for a registered user.

The first administrator has to be created out of band; an operator runs
this against the configured store:

  python scripts/grant_admin.py jane@example.com
  python scripts/grant_admin.py jane@example.com --revoke
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tradedesk.db import DbClient
from tradedesk.dependencies import get_db_client
from tradedesk.errors import ConflictError
from tradedesk.types import AppRole

logger = logging.getLogger(__name__)


def set_admin(db: DbClient, email: str, *, revoke: bool = False) -> bool:
    """Return True when the role assignment changed."""
    identity = db.get_identity_by_email(email)
    if identity is None:
        raise LookupError(f"No user registered with email {email}")
    if revoke:
        changed = db.delete_role(identity.id, AppRole.ADMIN)
    else:
        try:
            db.insert_role(identity.id, AppRole.ADMIN)
            changed = True
        except ConflictError:
            changed = False
    logger.info(
        "%s admin for %s: %s",
        "Revoked" if revoke else "Granted",
        identity.id,
        "changed" if changed else "unchanged",
    )
    return changed


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("email", help="Email of the registered user")
    parser.add_argument(
        "--revoke", action="store_true", help="Remove the admin role instead"
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    try:
        changed = set_admin(get_db_client(), args.email.strip().lower(), revoke=args.revoke)
    except LookupError as exc:
        logger.error("%s", exc)
        return 1
    print("updated" if changed else "no change")
    return 0


if __name__ == "__main__":
    sys.exit(main())
