#!/usr/bin/env python3
"""
NodeForge Panel - Flask application initialization
Server transfers between nodes and the credit store
"""

from flask import Flask, jsonify
from flask_socketio import SocketIO

# Import configuration and errors
from config import PanelConfig, APP_VERSION
from exceptions import PanelError
from auth import init_auth
from websocket import register_websocket_handlers, start_cleanup_thread, websocket_connections

# Import models
from models import DatabaseManager

# Import services
from services import PanelCoordinator

# Import routes
from routes import (
    auth_bp, admin_servers_bp, remote_bp, store_bp,
    init_auth_routes, init_admin_server_routes, init_remote_routes, init_store_routes
)


def create_app(config=None, db_manager=None, daemon_client=None, start_background=True):
    """Build the Flask app, its SocketIO server and the shared services"""
    config = config or PanelConfig()

    app = Flask(__name__)
    app.config['SECRET_KEY'] = config.get('SECRET_KEY', 'nodeforge-secret-key-change-me')
    app.config['MAX_CONTENT_LENGTH'] = 16 * 1024 * 1024  # 16MB max request size
    app.config['PREFERRED_URL_SCHEME'] = config.get('PREFERRED_URL_SCHEME', 'https')

    # Initialize SocketIO
    socketio = SocketIO(
        app,
        cors_allowed_origins="*",
        ping_timeout=60,
        ping_interval=25
    )

    # Initialize global objects
    db_manager = db_manager or DatabaseManager(config.get('DATABASE_PATH', 'nodeforge.db'))
    coordinator = PanelCoordinator(config, db_manager, socketio, daemon_client=daemon_client)
    init_auth(config, coordinator.user_model, coordinator.node_model)

    # Register WebSocket handlers
    register_websocket_handlers(socketio)
    if start_background:
        start_cleanup_thread(socketio)

    # Initialize route dependencies
    init_auth_routes(coordinator.user_model)
    init_admin_server_routes(coordinator)
    init_remote_routes(coordinator)
    init_store_routes(config, coordinator)

    # Register route blueprints
    app.register_blueprint(auth_bp, url_prefix='/api')
    app.register_blueprint(admin_servers_bp, url_prefix='/admin')
    app.register_blueprint(remote_bp, url_prefix='/api/remote')
    app.register_blueprint(store_bp, url_prefix='/api/client/store')

    @app.errorhandler(PanelError)
    def handle_panel_error(e):
        print(f"⚠️  {e.__class__.__name__}: {e.message}")
        return jsonify(e.to_dict()), e.status_code

    @app.route('/health')
    def health():
        """Liveness check"""
        return jsonify({
            "status": "success",
            "version": APP_VERSION,
            "websocket_connections": len(websocket_connections)
        })

    app.extensions['nodeforge'] = coordinator
    return app, socketio


# ===== MAIN ENTRY POINT =====

if __name__ == '__main__':
    panel_config = PanelConfig()
    app, socketio = create_app(panel_config)

    host = panel_config.get('HOST', '0.0.0.0')
    port = panel_config.get_int('PORT', 5000)
    print("NodeForge Panel starting...")
    print(f"Access the application at: http://localhost:{port}")

    socketio.run(app, host=host, port=port, debug=panel_config.get_bool('DEBUG'), allow_unsafe_werkzeug=True)
