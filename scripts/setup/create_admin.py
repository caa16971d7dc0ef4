# scripts/setup/create_admin.py
"""
Seed a verified admin account so the console can be used without the email flow.
Usage: python scripts/setup/create_admin.py --email admin@example.com --name Admin [--password ...]
"""

import argparse
import getpass
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from app.database import SessionLocal, create_tables
from app.models.admin import Admin
from app.services.security import hash_password


def main():
    parser = argparse.ArgumentParser(description="Create a verified admin account")
    parser.add_argument("--email", required=True)
    parser.add_argument("--name", default="Admin")
    parser.add_argument("--password", help="Prompted for when omitted")
    args = parser.parse_args()

    password = args.password or getpass.getpass("Password: ")
    if len(password) < 6:
        print("❌ Password must be at least 6 characters")
        sys.exit(1)

    create_tables()
    db = SessionLocal()
    try:
        email = args.email.strip().lower()
        if db.query(Admin).filter(Admin.email == email).first():
            print(f"⚠️  Admin {email} already exists")
            sys.exit(1)
        db.add(Admin(name=args.name, email=email, password=hash_password(password),
                     role="admin", is_email_verified=True))
        db.commit()
        print(f"✅ Admin {email} created")
    finally:
        db.close()


if __name__ == "__main__":
    main()
