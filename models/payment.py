#!/usr/bin/env python3
"""
NodeForge Payment Model
Gateway orders for store credit purchases

The credited amount is stored when the order is created, so the return
callback never trusts an amount supplied by the client.
"""

from datetime import datetime
from typing import Dict, Optional


class Payment:
    """Payment model for database operations"""

    def __init__(self, db_manager):
        self.db = db_manager

    def create(self, payment_data: Dict) -> str:
        with self.db.get_connection() as conn:
            conn.execute('''
                INSERT INTO payments (payment_id, reference_id, user_id, gateway, credits, cost, currency, status)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ''', (
                payment_data['payment_id'],
                payment_data['reference_id'],
                payment_data['user_id'],
                payment_data.get('gateway', 'paypal'),
                payment_data['credits'],
                str(payment_data['cost']),
                payment_data['currency'],
                payment_data.get('status', 'pending'),
            ))
            conn.commit()
            return payment_data['payment_id']

    def get(self, payment_id: str) -> Optional[Dict]:
        with self.db.get_connection() as conn:
            row = conn.execute('SELECT * FROM payments WHERE payment_id = ?', (payment_id,)).fetchone()
            return dict(row) if row else None

    def set_status_if_pending(self, payment_id: str, status: str) -> bool:
        with self.db.get_connection() as conn:
            cursor = conn.execute('''
                UPDATE payments SET status = ? WHERE payment_id = ? AND status = 'pending'
            ''', (status, payment_id))
            conn.commit()
            return cursor.rowcount > 0

    def complete_and_credit(self, payment_id: str) -> bool:
        """
        Mark a pending payment completed and credit its user in one transaction.
        Returns False if the payment was not pending (already handled or unknown).
        """
        with self.db.get_connection() as conn:
            cursor = conn.execute('''
                UPDATE payments SET status = 'completed', completed_at = ?
                WHERE payment_id = ? AND status = 'pending'
            ''', (datetime.now().isoformat(), payment_id))
            if cursor.rowcount == 0:
                return False
            conn.execute('''
                UPDATE users SET store_balance = store_balance + (
                    SELECT credits FROM payments WHERE payment_id = ?
                ), updated_at = ?
                WHERE id = (SELECT user_id FROM payments WHERE payment_id = ?)
            ''', (payment_id, datetime.now().isoformat(), payment_id))
            conn.commit()
            return True
