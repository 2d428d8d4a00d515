#!/usr/bin/env python3
"""
NodeForge Server Transfer Service
Moves a server between nodes: capacity check, daemon checks, transfer record,
allocation reservation, archive request, and the daemon callbacks that finish it
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import jwt

from exceptions import DaemonConnectionError, ServerStateConflictError
from models.node import Node
from models.server import Server
from services.panel_logger import log_event, log_validation, log_state_change
from websocket import ADMIN_ROOM


SERVICE = "ServerTransferService"

# Lifetime of the token the receiving daemon uses to pull the archive
TRANSFER_TOKEN_TTL_MINUTES = 15


class ServerTransferService:
    """Service for node-to-node server transfers"""

    def __init__(self, config, node_model, server_model, allocation_model, transfer_model,
                 daemon_client, socketio=None):
        self.config = config
        self.node_model = node_model
        self.server_model = server_model
        self.allocation_model = allocation_model
        self.transfer_model = transfer_model
        self.daemon = daemon_client
        self.socketio = socketio

    def _emit(self, event: str, payload: Dict):
        if self.socketio:
            self.socketio.emit(event, payload, to=ADMIN_ROOM)

    # ===== STARTING A TRANSFER =====

    def start_transfer(self, server: Dict, node_id: int, allocation_id: int,
                       additional_allocations: List[int]) -> bool:
        """
        Start moving a server to another node.

        Returns False when the target node lacks capacity (nothing is changed).
        Raises DaemonConnectionError / ServerStateConflictError when a check fails.
        """
        log_event(SERVICE, f"Transfer requested to node {node_id} (allocation {allocation_id}, "
                           f"additional {additional_allocations})", icon="🎯", server_id=server['id'])

        node = self.node_model.get_with_resource_usage(node_id)
        viable = Node.is_viable(node, server['memory'], server['disk'])
        log_validation(SERVICE, viable,
                       f"Node {node_id} capacity: memory {node['sum_memory']}+{server['memory']}/{node['memory']} "
                       f"(+{node['memory_overallocate']}%), disk {node['sum_disk']}+{server['disk']}/{node['disk']} "
                       f"(+{node['disk_overallocate']}%)",
                       server_id=server['id'])
        if not viable:
            return False

        # Target daemon must be online before anything is written
        self.daemon.get_system_information(node)

        Server.validate_transfer_state(server, self.transfer_model.get_active_for_server(server['id']))

        transfer_id = self.transfer_model.create({
            'server_id': server['id'],
            'old_node': server['node_id'],
            'new_node': node_id,
            'old_allocation': server['allocation_id'],
            'new_allocation': allocation_id,
            'old_additional_allocations': self.server_model.get_additional_allocation_ids(server),
            'new_additional_allocations': additional_allocations,
        })
        log_event(SERVICE, "Transfer record created", icon="📝", server_id=server['id'], transfer_id=transfer_id)

        # Reserve the allocations so they cannot be handed out while the transfer runs
        self.assign_allocations_to_server(server, node_id, allocation_id, additional_allocations)

        try:
            self.request_archive(server)
        except DaemonConnectionError:
            self._fail_transfer(self.transfer_model.get(transfer_id), server)
            raise

        self._emit('server_transfer_started', {
            'server_id': server['id'],
            'transfer_id': transfer_id,
            'old_node': server['node_id'],
            'new_node': node_id,
        })
        return True

    def assign_allocations_to_server(self, server: Dict, node_id: int, allocation_id: int,
                                     additional_allocations: List[int]) -> List[int]:
        """Assign the requested allocations that are still free on the target node; others are skipped"""
        requested = list(additional_allocations) + [allocation_id]
        unassigned = set(self.allocation_model.get_unassigned_ids(node_id))

        update_ids = [allocation for allocation in requested if allocation in unassigned]
        skipped = [allocation for allocation in requested if allocation not in unassigned]

        if update_ids:
            self.allocation_model.assign_to_server(update_ids, server['id'])
        if skipped:
            log_event(SERVICE, f"Skipped allocations not free on node {node_id}: {skipped}",
                      icon="⚠️", server_id=server['id'], indent=1)
        log_event(SERVICE, f"Reserved allocations {update_ids}", icon="🔗", server_id=server['id'], indent=1)
        return update_ids

    def request_archive(self, server: Dict):
        """Ask the server's current daemon to archive it"""
        node = self.node_model.get(server['node_id'])
        self.daemon.request_archive(node, server)
        log_event(SERVICE, f"Archive requested from node {node['id']}", icon="📦", server_id=server['id'])

    # ===== DAEMON CALLBACKS =====

    def _get_active_transfer(self, server: Dict) -> Dict:
        transfer = self.transfer_model.get_active_for_server(server['id'])
        if transfer is None:
            log_event(SERVICE, "Callback received but no transfer is in progress", icon="🚫",
                      server_id=server['id'])
            raise ServerStateConflictError(server)
        return transfer

    def archive_status(self, server: Dict, successful: bool) -> Dict:
        """Handle the source daemon reporting whether the archive was built"""
        transfer = self._get_active_transfer(server)

        if not successful:
            log_event(SERVICE, "Source daemon failed to archive server", icon="❌",
                      server_id=server['id'], transfer_id=transfer['id'])
            return self._fail_transfer(transfer, server)

        self.transfer_model.update(transfer['id'], {'archived': True})
        log_state_change(SERVICE, 'pending', 'archived', server_id=server['id'], transfer_id=transfer['id'])

        old_node = self.node_model.get(transfer['old_node'])
        new_node = self.node_model.get(transfer['new_node'])
        payload = {
            'server_id': server['uuid'],
            'url': f"{Node.get_connection_address(old_node)}/api/servers/{server['uuid']}/archive",
            'token': f"Bearer {self.generate_transfer_token(old_node, server)}",
            'server': {
                'uuid': server['uuid'],
                'start_on_completion': False,
            },
        }

        try:
            self.daemon.notify_transfer(new_node, payload)
        except DaemonConnectionError:
            self._fail_transfer(transfer, server)
            raise

        log_event(SERVICE, f"Node {new_node['id']} notified to pull archive", icon="📨",
                  server_id=server['id'], transfer_id=transfer['id'])
        return self.transfer_model.get(transfer['id'])

    def transfer_success(self, server: Dict) -> Dict:
        """Finalize a transfer: move the server and free its old allocations"""
        transfer = self._get_active_transfer(server)
        if not transfer['archived']:
            log_event(SERVICE, "Success reported before the archive was built", icon="🚫",
                      server_id=server['id'], transfer_id=transfer['id'])
            raise ServerStateConflictError(server)

        self.server_model.update(server['id'], {
            'node_id': transfer['new_node'],
            'allocation_id': transfer['new_allocation'],
        })
        released = self.allocation_model.release(
            [transfer['old_allocation']] + transfer['old_additional_allocations'], server['id']
        )
        self.transfer_model.update(transfer['id'], {'successful': True})

        log_state_change(SERVICE, 'archived', 'successful', server_id=server['id'], transfer_id=transfer['id'])
        log_event(SERVICE, f"Released {released} allocations on node {transfer['old_node']}",
                  icon="🧹", server_id=server['id'], transfer_id=transfer['id'], indent=1)

        self._emit('server_transfer_completed', {
            'server_id': server['id'],
            'transfer_id': transfer['id'],
            'node_id': transfer['new_node'],
        })
        return self.transfer_model.get(transfer['id'])

    def transfer_failure(self, server: Dict) -> Dict:
        transfer = self._get_active_transfer(server)
        return self._fail_transfer(transfer, server)

    def _fail_transfer(self, transfer: Dict, server: Dict) -> Dict:
        """Revert allocation reservations and close the transfer as failed"""
        released = self.allocation_model.release(
            [transfer['new_allocation']] + transfer['new_additional_allocations'], server['id']
        )
        self.transfer_model.update(transfer['id'], {'successful': False})

        log_state_change(SERVICE, 'in progress', 'failed', server_id=server['id'], transfer_id=transfer['id'])
        log_event(SERVICE, f"Released {released} reserved allocations on node {transfer['new_node']}",
                  icon="🧹", server_id=server['id'], transfer_id=transfer['id'], indent=1)

        self._emit('server_transfer_failed', {
            'server_id': server['id'],
            'transfer_id': transfer['id'],
        })
        return self.transfer_model.get(transfer['id'])

    # ===== HELPERS =====

    def generate_transfer_token(self, node: Dict, server: Dict) -> str:
        """JWT the receiving daemon presents to the source daemon to download the archive"""
        now = datetime.now(timezone.utc)
        payload = {
            'iss': self.config.get('APP_URL', 'http://localhost:5000'),
            'aud': [Node.get_connection_address(node)],
            'jti': uuid.uuid4().hex,
            'iat': now,
            'nbf': now - timedelta(minutes=5),
            'exp': now + timedelta(minutes=TRANSFER_TOKEN_TTL_MINUTES),
            'sub': server['uuid'],
            'unique_id': uuid.uuid4().hex,
        }
        return jwt.encode(payload, node['daemon_token'], algorithm='HS256')

    def get_node_usage(self, node_id: int) -> Optional[Dict]:
        node = self.node_model.get_with_resource_usage(node_id)
        if not node:
            return None

        def _limit(total, overallocate):
            return None if overallocate == -1 else int(total * (1 + overallocate / 100))

        return {
            'id': node['id'],
            'name': node['name'],
            'server_count': node['server_count'],
            'memory': {
                'used': node['sum_memory'],
                'total': node['memory'],
                'limit': _limit(node['memory'], node['memory_overallocate']),
            },
            'disk': {
                'used': node['sum_disk'],
                'total': node['disk'],
                'limit': _limit(node['disk'], node['disk_overallocate']),
            },
            'free_allocations': len(self.allocation_model.get_unassigned_ids(node_id)),
        }
