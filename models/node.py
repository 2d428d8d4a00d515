#!/usr/bin/env python3
"""
NodeForge Node Model
Daemon hosts, their capacity limits and aggregated resource usage
"""

from typing import Dict, Optional


class Node:
    """Node model for database operations"""

    def __init__(self, db_manager):
        self.db = db_manager

    def create(self, node_data: Dict) -> int:
        """Create a node record and return its id"""
        with self.db.get_connection() as conn:
            cursor = conn.execute('''
                INSERT INTO nodes (
                    name, fqdn, scheme, daemon_listen, daemon_token_id, daemon_token,
                    memory, memory_overallocate, disk, disk_overallocate, maintenance_mode
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ''', (
                node_data['name'],
                node_data['fqdn'],
                node_data.get('scheme', 'https'),
                node_data.get('daemon_listen', 8080),
                node_data['daemon_token_id'],
                node_data['daemon_token'],
                node_data['memory'],
                node_data.get('memory_overallocate', 0),
                node_data['disk'],
                node_data.get('disk_overallocate', 0),
                1 if node_data.get('maintenance_mode') else 0,
            ))
            conn.commit()
            return cursor.lastrowid

    def get(self, node_id: int) -> Optional[Dict]:
        with self.db.get_connection() as conn:
            row = conn.execute('SELECT * FROM nodes WHERE id = ?', (node_id,)).fetchone()
            return dict(row) if row else None

    def exists(self, node_id: int) -> bool:
        with self.db.get_connection() as conn:
            row = conn.execute('SELECT 1 FROM nodes WHERE id = ?', (node_id,)).fetchone()
            return row is not None

    def get_by_daemon_token_id(self, token_id: str) -> Optional[Dict]:
        with self.db.get_connection() as conn:
            row = conn.execute('SELECT * FROM nodes WHERE daemon_token_id = ?', (token_id,)).fetchone()
            return dict(row) if row else None

    def get_with_resource_usage(self, node_id: int) -> Optional[Dict]:
        """Get node with sum_memory/sum_disk of every server currently placed on it"""
        with self.db.get_connection() as conn:
            row = conn.execute('''
                SELECT n.*,
                       COALESCE(SUM(s.memory), 0) AS sum_memory,
                       COALESCE(SUM(s.disk), 0) AS sum_disk,
                       COUNT(s.id) AS server_count
                FROM nodes n
                LEFT JOIN servers s ON s.node_id = n.id
                WHERE n.id = ?
                GROUP BY n.id
            ''', (node_id,)).fetchone()
            return dict(row) if row else None

    @staticmethod
    def is_viable(node: Dict, memory: int, disk: int) -> bool:
        """
        Check whether a node with usage columns can take an extra memory/disk load.
        An overallocate of -1 disables the corresponding limit.
        """
        if node['memory_overallocate'] != -1:
            memory_limit = node['memory'] * (1 + node['memory_overallocate'] / 100)
            if node['sum_memory'] + memory > memory_limit:
                return False

        if node['disk_overallocate'] != -1:
            disk_limit = node['disk'] * (1 + node['disk_overallocate'] / 100)
            if node['sum_disk'] + disk > disk_limit:
                return False

        return True

    @staticmethod
    def get_connection_address(node: Dict) -> str:
        """Base URL of the node's daemon API"""
        return f"{node['scheme']}://{node['fqdn']}:{node['daemon_listen']}"
