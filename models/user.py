#!/usr/bin/env python3
"""
NodeForge User Model
Panel accounts, admin flag and store balances
"""

from datetime import datetime
from typing import Dict, Optional

from werkzeug.security import generate_password_hash


# Maps a store resource name to the users column that tracks how much of it was bought
STORE_COLUMNS = {
    'cpu': 'store_cpu',
    'memory': 'store_memory',
    'disk': 'store_disk',
    'slot': 'store_slots',
    'port': 'store_ports',
    'backup': 'store_backups',
    'database': 'store_databases',
}


class User:
    """User model for database operations"""

    def __init__(self, db_manager):
        self.db = db_manager

    @staticmethod
    def to_public(user: Dict) -> Dict:
        """Strip secrets from a user row"""
        return {k: v for k, v in user.items() if k != 'password_hash'}

    def create(self, username: str, email: str, password: str, root_admin: bool = False,
               store_balance: int = 0) -> int:
        """Create a user and return its id"""
        with self.db.get_connection() as conn:
            cursor = conn.execute('''
                INSERT INTO users (username, email, password_hash, root_admin, store_balance)
                VALUES (?, ?, ?, ?, ?)
            ''', (
                username,
                email,
                generate_password_hash(password, method='pbkdf2:sha256'),
                1 if root_admin else 0,
                store_balance,
            ))
            conn.commit()
            print(f"✅ User '{username}' created with id {cursor.lastrowid}")
            return cursor.lastrowid

    def get(self, user_id: int) -> Optional[Dict]:
        with self.db.get_connection() as conn:
            row = conn.execute('SELECT * FROM users WHERE id = ?', (user_id,)).fetchone()
            return dict(row) if row else None

    def get_by_username(self, username: str) -> Optional[Dict]:
        with self.db.get_connection() as conn:
            row = conn.execute('SELECT * FROM users WHERE username = ?', (username,)).fetchone()
            return dict(row) if row else None

    def purchase_resource(self, user_id: int, resource: str, cost: int, amount: int) -> bool:
        """
        Deduct cost and grant resource in a single conditional update.
        Returns False when the balance is too low (nothing is changed).
        """
        column = STORE_COLUMNS[resource]
        with self.db.get_connection() as conn:
            cursor = conn.execute(f'''
                UPDATE users
                SET store_balance = store_balance - ?, {column} = {column} + ?, updated_at = ?
                WHERE id = ? AND store_balance >= ?
            ''', (cost, amount, datetime.now().isoformat(), user_id, cost))
            conn.commit()
            return cursor.rowcount > 0
