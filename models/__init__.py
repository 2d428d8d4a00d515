"""
NodeForge Models Package
Data Access Layer for database operations
"""

from .database import DatabaseManager
from .user import User
from .node import Node
from .allocation import Allocation
from .server import Server
from .server_transfer import ServerTransfer
from .payment import Payment
from .settings import AppSettings

__all__ = [
    'DatabaseManager',
    'User',
    'Node',
    'Allocation',
    'Server',
    'ServerTransfer',
    'Payment',
    'AppSettings'
]
