#!/usr/bin/env python3
"""
NodeForge WebSocket Manager
Authenticated WebSocket connections for live transfer and store events
"""

import time
import threading
from datetime import datetime, timedelta
from flask import request
from flask_socketio import join_room

from auth import validate_websocket_token


# Connections idle longer than this are dropped
WEBSOCKET_TIMEOUT = 35 * 60

# Room that receives server transfer events
ADMIN_ROOM = 'admins'


# WebSocket connection tracking
websocket_connections = {}


def user_room(user_id: int) -> str:
    """Room that receives events for a single user"""
    return f"user_{user_id}"


def register_websocket_handlers(socketio):
    """Register WebSocket event handlers"""

    @socketio.on('connect')
    def handle_connect(auth=None):
        """Reject unauthenticated sockets, then join the user's rooms"""
        user = validate_websocket_token(auth or {})
        if not user:
            print(f"🔒 WebSocket rejected (no valid token): {request.sid}")
            return False

        session_id = request.sid
        join_room(user_room(user['id']))
        if user.get('root_admin'):
            join_room(ADMIN_ROOM)

        websocket_connections[session_id] = {
            'user_id': user['id'],
            'connected_at': datetime.now(),
            'last_activity': datetime.now(),
        }
        print(f"🔌 WebSocket connected: {session_id} (user {user['username']})")
        print(f"🔌 Active WebSocket connections: {len(websocket_connections)}")

    @socketio.on('disconnect')
    def handle_disconnect(reason=None):
        session_id = request.sid
        websocket_connections.pop(session_id, None)
        print(f"🔌 WebSocket disconnected: {session_id}")
        print(f"🔌 Active WebSocket connections: {len(websocket_connections)}")

    @socketio.on('activity')
    def handle_activity():
        """Handle client activity ping"""
        session_id = request.sid
        if session_id in websocket_connections:
            websocket_connections[session_id]['last_activity'] = datetime.now()


def cleanup_stale_connections(socketio):
    """Cleanup stale WebSocket connections"""
    while True:
        try:
            timeout_threshold = datetime.now() - timedelta(seconds=WEBSOCKET_TIMEOUT)
            stale_connections = [
                session_id for session_id, info in list(websocket_connections.items())
                if info['last_activity'] < timeout_threshold
            ]

            for session_id in stale_connections:
                print(f"🧹 Cleaning up stale WebSocket connection: {session_id}")
                websocket_connections.pop(session_id, None)
                socketio.server.disconnect(session_id, namespace='/')

            if stale_connections:
                print(f"🧹 Cleaned up {len(stale_connections)} stale connections")

        except Exception as e:
            print(f"❌ Error in cleanup_stale_connections: {e}")

        # Sleep for 5 minutes before next cleanup
        time.sleep(5 * 60)


def start_cleanup_thread(socketio):
    """Start the WebSocket cleanup thread"""
    cleanup_thread = threading.Thread(target=cleanup_stale_connections, args=(socketio,), daemon=True)
    cleanup_thread.start()
    return cleanup_thread
