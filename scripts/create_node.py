#!/usr/bin/env python3
"""
NodeForge Node Registration Script

Registers a daemon host and its allocations. A daemon token id and secret
are generated unless given, and printed once so they can go into the
daemon's configuration.

Usage:
    python scripts/create_node.py NAME FQDN --memory MiB --disk MiB [--ports 25565-25570] [--ip 0.0.0.0]
"""

import argparse
import os
import secrets
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models import DatabaseManager, Node, Allocation  # noqa: E402


def parse_ports(value):
    """'25565', '25565-25570' or '25565,25570' -> sorted list of ports"""
    ports = set()
    for part in value.split(','):
        part = part.strip()
        if not part:
            continue
        if '-' in part:
            start, end = part.split('-', 1)
            start, end = int(start), int(end)
            if start > end or start < 1 or end > 65535:
                raise argparse.ArgumentTypeError(f"invalid port range: {part}")
            ports.update(range(start, end + 1))
        else:
            port = int(part)
            if port < 1 or port > 65535:
                raise argparse.ArgumentTypeError(f"invalid port: {part}")
            ports.add(port)
    return sorted(ports)


def main():
    parser = argparse.ArgumentParser(description='Register a NodeForge node')
    parser.add_argument('name', help='Display name')
    parser.add_argument('fqdn', help='Hostname the daemon listens on')
    parser.add_argument('--scheme', choices=['http', 'https'], default='https')
    parser.add_argument('--daemon-listen', type=int, default=8080, help='Daemon API port')
    parser.add_argument('--memory', type=int, required=True, help='Total memory in MiB')
    parser.add_argument('--memory-overallocate', type=int, default=0, help='Percent, -1 for unlimited')
    parser.add_argument('--disk', type=int, required=True, help='Total disk in MiB')
    parser.add_argument('--disk-overallocate', type=int, default=0, help='Percent, -1 for unlimited')
    parser.add_argument('--ip', type=str, default='0.0.0.0', help='Allocation IP')
    parser.add_argument('--ports', type=parse_ports, default=[], help='Allocation ports, e.g. 25565-25570')
    parser.add_argument('--token-id', type=str, help='Daemon token id (generated when omitted)')
    parser.add_argument('--token', type=str, help='Daemon token secret (generated when omitted)')
    parser.add_argument('--db-path', type=str, default='nodeforge.db', help='Custom database path')
    args = parser.parse_args()

    db_manager = DatabaseManager(args.db_path)
    node_model = Node(db_manager)
    allocation_model = Allocation(db_manager)

    token_id = args.token_id or secrets.token_hex(8)
    token = args.token or secrets.token_urlsafe(48)

    node_id = node_model.create({
        'name': args.name,
        'fqdn': args.fqdn,
        'scheme': args.scheme,
        'daemon_listen': args.daemon_listen,
        'daemon_token_id': token_id,
        'daemon_token': token,
        'memory': args.memory,
        'memory_overallocate': args.memory_overallocate,
        'disk': args.disk,
        'disk_overallocate': args.disk_overallocate,
    })
    print(f"🖥️  Node '{args.name}' registered with id {node_id}")

    for port in args.ports:
        allocation_model.create(node_id, args.ip, port)
    if args.ports:
        print(f"🔗 Created {len(args.ports)} allocations on {args.ip} ({args.ports[0]}-{args.ports[-1]})")

    print("=" * 60)
    print("🔑 Daemon credentials (shown once):")
    print(f"   token_id: {token_id}")
    print(f"   token:    {token}")
    print("=" * 60)


if __name__ == '__main__':
    main()
