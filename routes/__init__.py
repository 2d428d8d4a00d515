"""
NodeForge Routes Package
Presentation Layer - Flask blueprints for API endpoints
"""

from .auth import auth_bp, init_auth_routes
from .admin_servers import admin_servers_bp, init_admin_server_routes
from .remote import remote_bp, init_remote_routes
from .store import store_bp, init_store_routes

__all__ = [
    'auth_bp',
    'admin_servers_bp',
    'remote_bp',
    'store_bp',
    'init_auth_routes',
    'init_admin_server_routes',
    'init_remote_routes',
    'init_store_routes'
]
