"""
Create a user (e.g. the first administrator). Run from project root:
  python -m strongroom.scripts.create_user EMAIL PASSWORD [--name NAME] [--role ROLE_NAME]
Example:
  python -m strongroom.scripts.create_user admin@example.com your-secure-password --role admin

When --role names a role that does not exist yet, it is created with every permission.
"""
import argparse
import logging
import sys

from sqlalchemy import select

from strongroom.core.config import get_settings
from strongroom.core.database import create_db_engine, create_session_factory
from strongroom.core.errors import StrongroomError
from strongroom.models import Action, Resource, Role
from strongroom.schemas.role import PermissionSpec, RoleCreate
from strongroom.schemas.user import UserCreate
from strongroom.services.roles import create_role
from strongroom.services.users import create_user

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a Strongroom user (no registration UI).")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help="Password (6-128 chars)")
    parser.add_argument("--name", default=None, help="Display name")
    parser.add_argument("--role", default=None, help="Role name to assign")
    args = parser.parse_args()

    try:
        body = UserCreate(email=args.email.strip(), password=args.password, name=args.name)
    except ValueError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 1

    settings = get_settings()
    engine = create_db_engine(settings)
    db = create_session_factory(engine)()
    try:
        if args.role:
            role = db.scalars(select(Role).where(Role.name == args.role)).one_or_none()
            if role is None:
                role = create_role(
                    db,
                    RoleCreate(
                        name=args.role,
                        permissions=[
                            PermissionSpec(resource=resource, action=list(Action))
                            for resource in Resource
                        ],
                    ),
                )
            body.role_id = role.id
        user = create_user(db, body, settings)
        print(f"Created user '{user.email}' ({user.id}).")
        return 0
    except StrongroomError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
