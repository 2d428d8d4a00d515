#!/usr/bin/env python3
"""
NodeForge Database Manager
Provides SQLite database initialization and connection management

Tables:
- users, nodes, allocations, servers: panel inventory
- server_transfers: node-to-node transfer bookkeeping
- payments: gateway orders used for store credit purchases
- app_settings: runtime key-value settings
"""

import sqlite3
import os


class DatabaseManager:
    """Database manager for SQLite operations"""

    def __init__(self, db_path: str = "nodeforge.db"):
        # Store database path relative to script directory (absolute paths are kept as-is)
        script_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        self.db_path = os.path.join(script_dir, db_path)
        print(f"🗄️  Database path: {self.db_path}")
        self.init_database()

    def init_database(self):
        """Initialize database and create tables"""
        with self.get_connection() as conn:
            # ==========================================
            # Table: users
            # ==========================================
            conn.execute('''
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    username TEXT UNIQUE NOT NULL,
                    email TEXT UNIQUE NOT NULL,
                    password_hash TEXT NOT NULL,
                    root_admin INTEGER NOT NULL DEFAULT 0,
                    store_balance INTEGER NOT NULL DEFAULT 0,
                    store_cpu INTEGER NOT NULL DEFAULT 0,
                    store_memory INTEGER NOT NULL DEFAULT 0,
                    store_disk INTEGER NOT NULL DEFAULT 0,
                    store_slots INTEGER NOT NULL DEFAULT 0,
                    store_ports INTEGER NOT NULL DEFAULT 0,
                    store_backups INTEGER NOT NULL DEFAULT 0,
                    store_databases INTEGER NOT NULL DEFAULT 0,
                    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
                )
            ''')

            # ==========================================
            # Table: nodes (daemon hosts)
            # ==========================================
            conn.execute('''
                CREATE TABLE IF NOT EXISTS nodes (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    fqdn TEXT NOT NULL,
                    scheme TEXT NOT NULL DEFAULT 'https',
                    daemon_listen INTEGER NOT NULL DEFAULT 8080,
                    daemon_token_id TEXT UNIQUE NOT NULL,
                    daemon_token TEXT NOT NULL,
                    memory INTEGER NOT NULL,
                    memory_overallocate INTEGER NOT NULL DEFAULT 0,
                    disk INTEGER NOT NULL,
                    disk_overallocate INTEGER NOT NULL DEFAULT 0,
                    maintenance_mode INTEGER NOT NULL DEFAULT 0,
                    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                )
            ''')

            # ==========================================
            # Table: allocations (ip:port pairs owned by a node)
            # ==========================================
            conn.execute('''
                CREATE TABLE IF NOT EXISTS allocations (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    node_id INTEGER NOT NULL REFERENCES nodes(id) ON DELETE CASCADE,
                    ip TEXT NOT NULL,
                    port INTEGER NOT NULL,
                    server_id INTEGER REFERENCES servers(id) ON DELETE SET NULL,
                    notes TEXT,
                    UNIQUE (node_id, ip, port)
                )
            ''')

            # ==========================================
            # Table: servers
            # ==========================================
            conn.execute('''
                CREATE TABLE IF NOT EXISTS servers (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    uuid TEXT UNIQUE NOT NULL,
                    name TEXT NOT NULL,
                    owner_id INTEGER NOT NULL REFERENCES users(id),
                    node_id INTEGER NOT NULL REFERENCES nodes(id),
                    allocation_id INTEGER UNIQUE NOT NULL REFERENCES allocations(id),
                    memory INTEGER NOT NULL,
                    disk INTEGER NOT NULL,
                    cpu INTEGER NOT NULL DEFAULT 0,
                    status TEXT,
                    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
                )
            ''')

            # ==========================================
            # Table: server_transfers
            # ==========================================
            conn.execute('''
                CREATE TABLE IF NOT EXISTS server_transfers (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    server_id INTEGER NOT NULL REFERENCES servers(id) ON DELETE CASCADE,
                    old_node INTEGER NOT NULL,
                    new_node INTEGER NOT NULL,
                    old_allocation INTEGER NOT NULL,
                    new_allocation INTEGER NOT NULL,
                    old_additional_allocations TEXT DEFAULT '[]',
                    new_additional_allocations TEXT DEFAULT '[]',
                    successful INTEGER,
                    archived INTEGER NOT NULL DEFAULT 0,
                    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
                )
            ''')

            # ==========================================
            # Table: payments (gateway orders for store credits)
            # ==========================================
            conn.execute('''
                CREATE TABLE IF NOT EXISTS payments (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    payment_id TEXT UNIQUE NOT NULL,
                    reference_id TEXT NOT NULL,
                    user_id INTEGER NOT NULL REFERENCES users(id),
                    gateway TEXT NOT NULL DEFAULT 'paypal',
                    credits INTEGER NOT NULL,
                    cost TEXT NOT NULL,
                    currency TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'pending',
                    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                    completed_at DATETIME
                )
            ''')

            # ==========================================
            # Table: app_settings (key-value store)
            # ==========================================
            conn.execute('''
                CREATE TABLE IF NOT EXISTS app_settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
                )
            ''')

            # ==========================================
            # Indexes
            # ==========================================
            conn.execute('CREATE INDEX IF NOT EXISTS idx_allocations_node ON allocations(node_id, server_id)')
            conn.execute('CREATE INDEX IF NOT EXISTS idx_allocations_server ON allocations(server_id)')
            conn.execute('CREATE INDEX IF NOT EXISTS idx_servers_node ON servers(node_id)')
            conn.execute('CREATE INDEX IF NOT EXISTS idx_server_transfers_server ON server_transfers(server_id, successful)')
            conn.execute('CREATE INDEX IF NOT EXISTS idx_payments_user ON payments(user_id, status)')

            conn.commit()

        print(f"✅ Database initialized: {self.db_path}")

    def get_connection(self):
        """Get database connection with row factory"""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute('PRAGMA foreign_keys = ON')
        return conn
