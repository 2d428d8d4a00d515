#!/usr/bin/env python3
"""
NodeForge Server Model
Game servers placed on nodes, plus the state checks that guard transfers
"""

import uuid
from datetime import datetime
from typing import Dict, List, Optional

from exceptions import ServerStateConflictError


STATUS_INSTALLING = 'installing'
STATUS_INSTALL_FAILED = 'install_failed'
STATUS_RESTORING_BACKUP = 'restoring_backup'


class Server:
    """Server model for database operations"""

    def __init__(self, db_manager):
        self.db = db_manager

    def create(self, server_data: Dict) -> int:
        """Create a server and claim its primary allocation"""
        server_uuid = server_data.get('uuid') or str(uuid.uuid4())
        with self.db.get_connection() as conn:
            cursor = conn.execute('''
                INSERT INTO servers (uuid, name, owner_id, node_id, allocation_id, memory, disk, cpu, status)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            ''', (
                server_uuid,
                server_data['name'],
                server_data['owner_id'],
                server_data['node_id'],
                server_data['allocation_id'],
                server_data['memory'],
                server_data['disk'],
                server_data.get('cpu', 0),
                server_data.get('status'),
            ))
            server_id = cursor.lastrowid
            conn.execute(
                'UPDATE allocations SET server_id = ? WHERE id = ?',
                (server_id, server_data['allocation_id']),
            )
            conn.commit()
            return server_id

    def get(self, server_id: int) -> Optional[Dict]:
        with self.db.get_connection() as conn:
            row = conn.execute('SELECT * FROM servers WHERE id = ?', (server_id,)).fetchone()
            return dict(row) if row else None

    def get_by_uuid(self, server_uuid: str) -> Optional[Dict]:
        with self.db.get_connection() as conn:
            row = conn.execute('SELECT * FROM servers WHERE uuid = ?', (server_uuid,)).fetchone()
            return dict(row) if row else None

    def update(self, server_id: int, updates: Dict) -> bool:
        """Update server record"""
        if not updates:
            return False

        updates['updated_at'] = datetime.now().isoformat()
        set_clause = ', '.join([f"{key} = ?" for key in updates.keys()])
        values = list(updates.values()) + [server_id]

        with self.db.get_connection() as conn:
            cursor = conn.execute(f'UPDATE servers SET {set_clause} WHERE id = ?', values)
            conn.commit()
            return cursor.rowcount > 0

    def get_additional_allocation_ids(self, server: Dict) -> List[int]:
        """Allocations held by the server other than its primary one"""
        with self.db.get_connection() as conn:
            rows = conn.execute('''
                SELECT id FROM allocations WHERE server_id = ? AND id != ? ORDER BY id
            ''', (server['id'], server['allocation_id'])).fetchall()
            return [row['id'] for row in rows]

    @staticmethod
    def is_installed(server: Dict) -> bool:
        return server.get('status') not in (STATUS_INSTALLING, STATUS_INSTALL_FAILED)

    @staticmethod
    def validate_transfer_state(server: Dict, active_transfer: Optional[Dict]) -> None:
        """
        Raise ServerStateConflictError when the server cannot be transferred:
        not installed, restoring a backup, or already mid-transfer.
        """
        if (
            not Server.is_installed(server)
            or server.get('status') == STATUS_RESTORING_BACKUP
            or active_transfer is not None
        ):
            raise ServerStateConflictError(server)
