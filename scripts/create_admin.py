"""
Script to grant or revoke the admin role for a user in the database.
Usage:
  python scripts/create_admin.py --username head_chef
  python scripts/create_admin.py --username head_chef --revoke

This sets the `role` field on the users collection. The role is read when
a token is issued, so the user must log in again for it to take effect.
It uses MONGODB_URI and DATABASE_NAME environment variables from .env
"""
import os
import argparse
import sys
from dotenv import load_dotenv
from pymongo import MongoClient


def set_user_role(users, username: str, role: str) -> bool:
    """Return True when a user with that username exists"""
    res = users.update_one({"username": username}, {"$set": {"role": role}})
    return bool(res.matched_count)


def main(argv=None) -> int:
    load_dotenv()

    parser = argparse.ArgumentParser()
    parser.add_argument("--username", required=True, help="Username of the account to change")
    parser.add_argument("--revoke", action="store_true", help="Demote the user back to role=user")
    args = parser.parse_args(argv)

    mongodb_uri = os.getenv("MONGODB_URI")
    if not mongodb_uri:
        print("MONGODB_URI not set in environment")
        return 1

    client = MongoClient(mongodb_uri)
    try:
        users = client[os.getenv("DATABASE_NAME", "recipehub")]["users"]
        role = "user" if args.revoke else "admin"
        if set_user_role(users, args.username, role):
            print(f"User {args.username} updated to role={role}")
            return 0
        print(f"No user found with username {args.username}")
        return 1
    finally:
        client.close()


if __name__ == "__main__":
    sys.exit(main())
