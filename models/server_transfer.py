#!/usr/bin/env python3
"""
NodeForge ServerTransfer Model
Bookkeeping for moving a server from one node to another

A transfer is in progress while `successful` is NULL; it ends as 1 (moved) or 0 (reverted).
"""

import json
from datetime import datetime
from typing import Dict, List, Optional


class ServerTransfer:
    """ServerTransfer model for database operations"""

    def __init__(self, db_manager):
        self.db = db_manager

    @staticmethod
    def _decode(row) -> Dict:
        transfer = dict(row)
        for key in ('old_additional_allocations', 'new_additional_allocations'):
            try:
                transfer[key] = json.loads(transfer[key]) if transfer[key] else []
            except json.JSONDecodeError:
                transfer[key] = []
        if transfer['successful'] is not None:
            transfer['successful'] = bool(transfer['successful'])
        transfer['archived'] = bool(transfer['archived'])
        return transfer

    def create(self, transfer_data: Dict) -> int:
        """Create a new transfer record and return its id"""
        with self.db.get_connection() as conn:
            cursor = conn.execute('''
                INSERT INTO server_transfers (
                    server_id, old_node, new_node, old_allocation, new_allocation,
                    old_additional_allocations, new_additional_allocations
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
            ''', (
                transfer_data['server_id'],
                transfer_data['old_node'],
                transfer_data['new_node'],
                transfer_data['old_allocation'],
                transfer_data['new_allocation'],
                json.dumps(list(transfer_data.get('old_additional_allocations', []))),
                json.dumps(list(transfer_data.get('new_additional_allocations', []))),
            ))
            conn.commit()
            return cursor.lastrowid

    def get(self, transfer_id: int) -> Optional[Dict]:
        with self.db.get_connection() as conn:
            row = conn.execute('SELECT * FROM server_transfers WHERE id = ?', (transfer_id,)).fetchone()
            return self._decode(row) if row else None

    def get_active_for_server(self, server_id: int) -> Optional[Dict]:
        """Latest unfinished transfer for a server, if any"""
        with self.db.get_connection() as conn:
            row = conn.execute('''
                SELECT * FROM server_transfers
                WHERE server_id = ? AND successful IS NULL
                ORDER BY id DESC LIMIT 1
            ''', (server_id,)).fetchone()
            return self._decode(row) if row else None

    def update(self, transfer_id: int, updates: Dict) -> bool:
        if not updates:
            return False

        updates['updated_at'] = datetime.now().isoformat()
        for key in ('successful', 'archived'):
            if isinstance(updates.get(key), bool):
                updates[key] = 1 if updates[key] else 0

        set_clause = ', '.join([f"{key} = ?" for key in updates.keys()])
        values = list(updates.values()) + [transfer_id]

        with self.db.get_connection() as conn:
            cursor = conn.execute(f'UPDATE server_transfers SET {set_clause} WHERE id = ?', values)
            conn.commit()
            return cursor.rowcount > 0

    def get_all(self, status_filter: str = None, limit: int = 50) -> List[Dict]:
        """Get transfers, newest first. status_filter: active | successful | failed"""
        query = "SELECT * FROM server_transfers"
        conditions = {
            'active': 'successful IS NULL',
            'successful': 'successful = 1',
            'failed': 'successful = 0',
        }
        if status_filter in conditions:
            query += f" WHERE {conditions[status_filter]}"
        query += " ORDER BY id DESC LIMIT ?"

        with self.db.get_connection() as conn:
            rows = conn.execute(query, (limit,)).fetchall()
            return [self._decode(r) for r in rows]
