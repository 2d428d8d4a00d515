#!/usr/bin/env python3
"""
NodeForge Daemon Client
HTTP client for the per-node daemon API (system info, archives, transfers)
"""

from typing import Dict, Optional

import requests

from exceptions import DaemonConnectionError
from models.node import Node


class DaemonClient:
    """Talks to the daemon running on a node"""

    def __init__(self, timeout: float = 10, connect_timeout: float = 5):
        self.timeout = timeout
        self.connect_timeout = connect_timeout

    def _headers(self, node: Dict) -> Dict[str, str]:
        return {
            'Accept': 'application/json',
            'Content-Type': 'application/json',
            'Authorization': f"Bearer {node['daemon_token']}",
        }

    def _request(self, node: Dict, method: str, path: str, json: Optional[Dict] = None) -> requests.Response:
        url = f"{Node.get_connection_address(node)}{path}"
        try:
            response = requests.request(
                method,
                url,
                headers=self._headers(node),
                json=json,
                timeout=(self.connect_timeout, self.timeout),
            )
        except requests.RequestException as e:
            print(f"❌ Daemon request {method} {url} failed: {e}")
            raise DaemonConnectionError(
                f"Unable to connect to the daemon on node '{node['name']}'."
            ) from e

        if response.status_code >= 400:
            print(f"❌ Daemon request {method} {url} returned HTTP {response.status_code}")
            raise DaemonConnectionError(
                f"The daemon on node '{node['name']}' returned HTTP {response.status_code}.",
                status=response.status_code,
            )
        return response

    def get_system_information(self, node: Dict) -> Dict:
        """Fetch daemon system information; doubles as a reachability check"""
        response = self._request(node, 'GET', '/api/system')
        try:
            return response.json()
        except ValueError:
            return {}

    def request_archive(self, node: Dict, server: Dict) -> None:
        """Ask the daemon hosting the server to build a transfer archive"""
        self._request(node, 'POST', f"/api/servers/{server['uuid']}/archive")

    def notify_transfer(self, node: Dict, payload: Dict) -> None:
        """Tell the receiving daemon to pull a server archive"""
        self._request(node, 'POST', '/api/transfer', json=payload)
