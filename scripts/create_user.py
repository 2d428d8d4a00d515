#!/usr/bin/env python3
"""
NodeForge User Creation Script

Creates a panel account, optionally as root admin and with a starting store balance.

Usage:
    python scripts/create_user.py USERNAME EMAIL [--password PASS] [--admin] [--balance N] [--db-path PATH]

Options:
    --password PASS  Account password (prompted when omitted)
    --admin          Grant root admin
    --balance N      Initial store credits
    --db-path PATH   Custom database path (default: nodeforge.db in project root)
"""

import argparse
import getpass
import os
import sqlite3
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models import DatabaseManager, User  # noqa: E402


def main():
    parser = argparse.ArgumentParser(description='Create a NodeForge panel user')
    parser.add_argument('username', help='Login name')
    parser.add_argument('email', help='Email address')
    parser.add_argument('--password', type=str, help='Password (prompted when omitted)')
    parser.add_argument('--admin', action='store_true', help='Create a root admin')
    parser.add_argument('--balance', type=int, default=0, help='Initial store balance')
    parser.add_argument('--db-path', type=str, default='nodeforge.db', help='Custom database path')
    args = parser.parse_args()

    password = args.password or getpass.getpass('Password: ')
    if len(password) < 8:
        print("❌ Password must be at least 8 characters")
        sys.exit(1)

    user_model = User(DatabaseManager(args.db_path))
    if user_model.get_by_username(args.username):
        print(f"❌ User '{args.username}' already exists")
        sys.exit(1)

    try:
        user_id = user_model.create(args.username, args.email, password,
                                    root_admin=args.admin, store_balance=args.balance)
    except sqlite3.IntegrityError as e:
        print(f"❌ Could not create user: {e}")
        sys.exit(1)

    role = "root admin" if args.admin else "client"
    print(f"👤 {role} '{args.username}' ready (id {user_id}, balance {args.balance})")


if __name__ == '__main__':
    main()
