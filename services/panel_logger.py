#!/usr/bin/env python3
"""
NodeForge Panel Logger
Console logging with service tags and server/transfer/payment id tracking
"""


def log_event(service: str, message: str, icon: str = "📋",
              server_id: int = None, transfer_id: int = None,
              payment_id: str = None, indent: int = 0):
    """
    Print a tagged log line

    Args:
        service: Service name (e.g., "ServerTransferService", "PayPalService")
        message: Log message
        icon: Emoji icon for visual identification
        server_id: Optional server id
        transfer_id: Optional server transfer id
        payment_id: Optional gateway payment id
        indent: Number of indent levels (for hierarchical logs)

    Example:
        log_event("ServerTransferService", "Archive requested", icon="📦", server_id=4, transfer_id=12)
        Output: 📦 [ServerTransferService] [server_id:4][transfer_id:12] > Archive requested
    """
    ids = []
    if server_id is not None:
        ids.append(f"server_id:{server_id}")
    if transfer_id is not None:
        ids.append(f"transfer_id:{transfer_id}")
    if payment_id is not None:
        ids.append(f"payment_id:{payment_id}")

    id_str = f"[{']['.join(ids)}]" if ids else ""

    indent_str = "   " * indent
    service_str = f"[{service}]"
    separator = " >" if id_str else ">"

    print(f"{icon} {service_str} {id_str}{separator} {indent_str}{message}")


def log_validation(service: str, result: bool, message: str, icon: str = None,
                   server_id: int = None, transfer_id: int = None):
    """Log a check result with a pass/fail icon"""
    if icon is None:
        icon = "✅" if result else "❌"

    log_event(service, message, icon=icon, server_id=server_id, transfer_id=transfer_id)


def log_state_change(service: str, old_state: str, new_state: str,
                     server_id: int = None, transfer_id: int = None, payment_id: str = None):
    """Log state transitions"""
    log_event(service, f"State change: {old_state} → {new_state}", icon="🔄",
              server_id=server_id, transfer_id=transfer_id, payment_id=payment_id)
