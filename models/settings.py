#!/usr/bin/env python3
"""
NodeForge AppSettings Model
Key-value settings store in SQLite for runtime toggles (store gateways, costs, branding)
"""

from typing import Optional


class AppSettings:
    """Simple key-value settings store in SQLite."""

    def __init__(self, db_manager):
        self.db = db_manager

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get setting value by key"""
        with self.db.get_connection() as conn:
            row = conn.execute('SELECT value FROM app_settings WHERE key = ?', (key,)).fetchone()
            return (row[0] if row else default)

    def set(self, key: str, value: str) -> None:
        """Set setting value"""
        with self.db.get_connection() as conn:
            conn.execute('''
                INSERT INTO app_settings (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP
            ''', (key, str(value)))
            conn.commit()

    def get_int(self, key: str, default: int = 0) -> int:
        """Get integer setting value, falling back when unset or malformed"""
        val = self.get(key)
        if val is None:
            return default
        try:
            return int(val)
        except ValueError:
            print(f"⚠️  Setting '{key}' is not an integer ({val!r}), using default: {default}")
            return default
