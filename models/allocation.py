#!/usr/bin/env python3
"""
NodeForge Allocation Model
ip:port pairs owned by nodes and assigned to servers
"""

from typing import Dict, Iterable, List, Optional


class Allocation:
    """Allocation model for database operations"""

    def __init__(self, db_manager):
        self.db = db_manager

    def create(self, node_id: int, ip: str, port: int, server_id: Optional[int] = None) -> int:
        with self.db.get_connection() as conn:
            cursor = conn.execute('''
                INSERT INTO allocations (node_id, ip, port, server_id) VALUES (?, ?, ?, ?)
            ''', (node_id, ip, port, server_id))
            conn.commit()
            return cursor.lastrowid

    def get(self, allocation_id: int) -> Optional[Dict]:
        with self.db.get_connection() as conn:
            row = conn.execute('SELECT * FROM allocations WHERE id = ?', (allocation_id,)).fetchone()
            return dict(row) if row else None

    def exists(self, allocation_id: int) -> bool:
        return self.get(allocation_id) is not None

    def is_primary_for_server(self, allocation_id: int) -> bool:
        """True when some server already uses this allocation as its primary one"""
        with self.db.get_connection() as conn:
            row = conn.execute('SELECT 1 FROM servers WHERE allocation_id = ?', (allocation_id,)).fetchone()
            return row is not None

    def get_for_server(self, server_id: int) -> List[Dict]:
        with self.db.get_connection() as conn:
            rows = conn.execute(
                'SELECT * FROM allocations WHERE server_id = ? ORDER BY id', (server_id,)
            ).fetchall()
            return [dict(r) for r in rows]

    def get_unassigned_ids(self, node_id: int) -> List[int]:
        """Ids of allocations on a node that no server holds"""
        with self.db.get_connection() as conn:
            rows = conn.execute(
                'SELECT id FROM allocations WHERE node_id = ? AND server_id IS NULL', (node_id,)
            ).fetchall()
            return [row['id'] for row in rows]

    def assign_to_server(self, allocation_ids: Iterable[int], server_id: int) -> int:
        ids = list(allocation_ids)
        if not ids:
            return 0
        placeholders = ', '.join('?' for _ in ids)
        with self.db.get_connection() as conn:
            cursor = conn.execute(
                f'UPDATE allocations SET server_id = ? WHERE id IN ({placeholders})',
                [server_id] + ids,
            )
            conn.commit()
            return cursor.rowcount

    def release(self, allocation_ids: Iterable[int], server_id: int) -> int:
        """Unassign allocations, only touching rows still held by the given server"""
        ids = list(allocation_ids)
        if not ids:
            return 0
        placeholders = ', '.join('?' for _ in ids)
        with self.db.get_connection() as conn:
            cursor = conn.execute(
                f'UPDATE allocations SET server_id = NULL WHERE server_id = ? AND id IN ({placeholders})',
                [server_id] + ids,
            )
            conn.commit()
            return cursor.rowcount
