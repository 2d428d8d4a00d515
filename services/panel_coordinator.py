#!/usr/bin/env python3
"""
NodeForge Panel Coordinator
Builds the models and services shared by the route blueprints
"""

from daemon import DaemonClient
from services.paypal_service import PayPalService
from services.server_transfer_service import ServerTransferService
from services.store_service import StoreService


class PanelCoordinator:
    """Owns model and service instances for one application"""

    def __init__(self, config, db_manager, socketio=None, daemon_client=None):
        print("🔄 Initializing PanelCoordinator")
        self.config = config
        self.db = db_manager
        self.socketio = socketio

        from models import User, Node, Allocation, Server, ServerTransfer, Payment, AppSettings

        # Initialize models
        self.user_model = User(db_manager)
        self.node_model = Node(db_manager)
        self.allocation_model = Allocation(db_manager)
        self.server_model = Server(db_manager)
        self.transfer_model = ServerTransfer(db_manager)
        self.payment_model = Payment(db_manager)
        self.settings = AppSettings(db_manager)

        self.daemon = daemon_client or DaemonClient(
            timeout=config.get_float('DAEMON_TIMEOUT', 10),
            connect_timeout=config.get_float('DAEMON_CONNECT_TIMEOUT', 5),
        )

        # Initialize services
        self.transfer_service = ServerTransferService(
            config, self.node_model, self.server_model, self.allocation_model,
            self.transfer_model, self.daemon, socketio
        )
        self.paypal_service = PayPalService(config, self.settings, self.user_model, self.payment_model, socketio)
        self.store_service = StoreService(self.settings, self.user_model, socketio)

        print("✅ PanelCoordinator initialized")

    def get_enabled_gateways(self):
        return {
            'paypal': self.paypal_service.is_enabled(),
        }
