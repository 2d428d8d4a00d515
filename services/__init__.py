"""
NodeForge Services Package
Business Logic Layer for operations orchestration
"""

from .panel_coordinator import PanelCoordinator

__all__ = [
    'PanelCoordinator'
]
