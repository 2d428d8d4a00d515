#!/usr/bin/env python3
"""
NodeForge Admin Server Routes
Server transfer orchestration, the server manage view, transfer listing and node usage
"""

from flask import Blueprint, jsonify, request, flash, redirect, url_for, get_flashed_messages
from auth import require_admin
from exceptions import DaemonConnectionError, ServerStateConflictError
from validation import validate_server_transfer

admin_servers_bp = Blueprint('admin_servers', __name__)

# Global references to be set by app.py
coordinator = None

TRANSFER_STARTED = 'The server transfer has started.'
TRANSFER_NOT_VIABLE = 'The selected node does not have enough resources to receive this server.'


def init_admin_server_routes(app_coordinator):
    """Initialize route dependencies"""
    global coordinator
    coordinator = app_coordinator


def _request_data():
    """Accept a JSON body or a classic form post"""
    if request.is_json:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}
    data = request.form.to_dict()
    additional = request.form.getlist('allocation_additional[]') or request.form.getlist('allocation_additional')
    data['allocation_additional'] = additional or None
    return data


@admin_servers_bp.route('/servers/view/<int:server_id>/manage/transfer', methods=['POST'])
@require_admin
def api_transfer_server(server_id):
    """Start a transfer of a server to a new node"""
    server = coordinator.server_model.get(server_id)
    if not server:
        return jsonify({"status": "error", "message": "Server not found"}), 404

    node_id, allocation_id, additional = validate_server_transfer(
        _request_data(), coordinator.node_model, coordinator.allocation_model
    )

    try:
        started = coordinator.transfer_service.start_transfer(server, node_id, allocation_id, additional)
        if started:
            flash(TRANSFER_STARTED, 'success')
        else:
            flash(TRANSFER_NOT_VIABLE, 'danger')
    except (DaemonConnectionError, ServerStateConflictError) as e:
        print(f"❌ Transfer of server {server_id} aborted: {e.message}")
        flash(e.message, 'danger')

    return redirect(url_for('admin_servers.api_manage_server', server_id=server_id))


@admin_servers_bp.route('/servers/view/<int:server_id>/manage')
@require_admin
def api_manage_server(server_id):
    """Server manage view: server, allocations, running transfer and pending alerts"""
    server = coordinator.server_model.get(server_id)
    if not server:
        return jsonify({"status": "error", "message": "Server not found"}), 404

    alerts = [
        {"type": category, "message": message}
        for category, message in get_flashed_messages(with_categories=True)
    ]

    return jsonify({
        "status": "success",
        "server": server,
        "allocations": coordinator.allocation_model.get_for_server(server_id),
        "transfer": coordinator.transfer_model.get_active_for_server(server_id),
        "alerts": alerts
    })


@admin_servers_bp.route('/transfers')
@require_admin
def api_list_transfers():
    """List server transfers; ?status=active|successful|failed"""
    limit = request.args.get('limit', 50, type=int)
    status_filter = request.args.get('status')
    transfers = coordinator.transfer_model.get_all(status_filter=status_filter, limit=limit)
    return jsonify({
        "status": "success",
        "transfers": transfers,
        "total": len(transfers)
    })


@admin_servers_bp.route('/nodes/<int:node_id>/usage')
@require_admin
def api_node_usage(node_id):
    """Resource usage and limits of a node"""
    usage = coordinator.transfer_service.get_node_usage(node_id)
    if not usage:
        return jsonify({"status": "error", "message": "Node not found"}), 404
    return jsonify({"status": "success", "node": usage})
