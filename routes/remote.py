#!/usr/bin/env python3
"""
NodeForge Remote Routes
Callbacks used by node daemons to report archive and transfer progress
"""

from flask import Blueprint, jsonify, request, g
from auth import require_daemon_auth

remote_bp = Blueprint('remote', __name__)

# Global references to be set by app.py
coordinator = None


def init_remote_routes(app_coordinator):
    """Initialize route dependencies"""
    global coordinator
    coordinator = app_coordinator


def _load_server(server_uuid, roles):
    """
    Resolve the server for the calling node.

    roles names which side of the running transfer may report: 'old' (source
    node), 'new' (target node). Without a running transfer only the node that
    hosts the server is accepted, and the service answers with a conflict.
    Returns (server, None) or (None, error_response).
    """
    server = coordinator.server_model.get_by_uuid(server_uuid)
    if not server:
        return None, (jsonify({"status": "error", "message": "Server not found"}), 404)

    transfer = coordinator.transfer_model.get_active_for_server(server['id'])
    if transfer:
        allowed_nodes = set()
        if 'old' in roles:
            allowed_nodes.add(transfer['old_node'])
        if 'new' in roles:
            allowed_nodes.add(transfer['new_node'])
    else:
        allowed_nodes = {server['node_id']}

    if g.node['id'] not in allowed_nodes:
        print(f"🚫 Node {g.node['id']} is not allowed to report on server {server_uuid}")
        return None, (jsonify({"status": "error", "message": "This node cannot report on this server"}), 403)

    return server, None


@remote_bp.route('/servers/<server_uuid>/archive', methods=['POST'])
@require_daemon_auth
def api_archive_status(server_uuid):
    """Source daemon reports whether the transfer archive was created"""
    server, error = _load_server(server_uuid, roles=('old',))
    if error:
        return error

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    # Only a JSON true counts as success
    successful = data.get('successful') is True

    transfer = coordinator.transfer_service.archive_status(server, successful)
    return jsonify({"status": "success", "transfer": transfer})


@remote_bp.route('/servers/<server_uuid>/transfer/success', methods=['POST'])
@require_daemon_auth
def api_transfer_success(server_uuid):
    """Receiving daemon reports the server was installed from the archive"""
    server, error = _load_server(server_uuid, roles=('new',))
    if error:
        return error

    transfer = coordinator.transfer_service.transfer_success(server)
    return jsonify({"status": "success", "transfer": transfer})


@remote_bp.route('/servers/<server_uuid>/transfer/failure', methods=['POST'])
@require_daemon_auth
def api_transfer_failure(server_uuid):
    """Either daemon reports the transfer could not complete"""
    server, error = _load_server(server_uuid, roles=('old', 'new'))
    if error:
        return error

    transfer = coordinator.transfer_service.transfer_failure(server)
    return jsonify({"status": "success", "transfer": transfer})
