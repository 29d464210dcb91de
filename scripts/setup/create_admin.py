# scripts/setup/create_admin.py
"""
Create an administrator account. Registration through the API only ever
creates employees, so admins are provisioned here.
Usage: python scripts/setup/create_admin.py --name "Fleet Admin" --email admin@example.com [--password ...]
"""

import sys
import os
import argparse
import getpass
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from requisition.config import settings
from requisition.database import create_db_engine, create_session_factory, create_tables
from requisition.exceptions import DuplicateEmail
from requisition.models.user import UserRole
from requisition.schemas.user import UserRegister
from requisition.services.auth_service import register_user


def main():
    parser = argparse.ArgumentParser(description="Create an admin user")
    parser.add_argument("--name", required=True)
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", help="Prompted for when omitted")
    args = parser.parse_args()

    password = args.password or getpass.getpass("Password: ")
    body = UserRegister(name=args.name, email=args.email, password=password)

    engine = create_db_engine(settings.DATABASE_URL)
    create_tables(engine)
    db = create_session_factory(engine)()
    try:
        user = register_user(db, body, role=UserRole.ADMIN)
        print(f"✅ Admin created: {user.email} (id={user.id})")
    except DuplicateEmail:
        print(f"❌ A user with email {body.email} already exists")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
