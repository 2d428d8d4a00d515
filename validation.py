#!/usr/bin/env python3
"""
NodeForge Request Validation
Rule sets for request payloads; each validator returns cleaned values or raises ValidationError
"""

from typing import Dict, List, Optional, Tuple

from exceptions import ValidationError


# Resources a user can buy from the store
STORE_RESOURCES = ('slot', 'cpu', 'memory', 'disk', 'port', 'backup', 'database')

PAYPAL_MIN_AMOUNT = 1
PAYPAL_MAX_AMOUNT = 10000


def _to_int(value) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip('-').isdigit():
        return int(value.strip())
    return None


def _is_missing(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_server_transfer(data: Dict, node_model, allocation_model) -> Tuple[int, int, List[int]]:
    """
    node_id:               required, exists in nodes
    allocation_id:         required, bail, not already a server's primary allocation,
                           exists in allocations (and belongs to the selected node)
    allocation_additional: nullable list of integers

    Returns (node_id, allocation_id, additional_allocation_ids)
    """
    errors: Dict[str, List[str]] = {}

    node_id = None
    raw_node = data.get('node_id')
    if _is_missing(raw_node):
        errors['node_id'] = ['The node id field is required.']
    else:
        node_id = _to_int(raw_node)
        if node_id is None or not node_model.exists(node_id):
            errors['node_id'] = ['The selected node id is invalid.']
            node_id = None

    allocation_id = None
    raw_allocation = data.get('allocation_id')
    if _is_missing(raw_allocation):
        errors['allocation_id'] = ['The allocation id field is required.']
    else:
        allocation_id = _to_int(raw_allocation)
        # Checks stop at the first failure for this field
        if allocation_id is None:
            errors['allocation_id'] = ['The allocation id must be an integer.']
        elif allocation_model.is_primary_for_server(allocation_id):
            errors['allocation_id'] = ['The allocation id has already been taken.']
        else:
            allocation = allocation_model.get(allocation_id)
            if allocation is None:
                errors['allocation_id'] = ['The selected allocation id is invalid.']
            elif node_id is not None and allocation['node_id'] != node_id:
                errors['allocation_id'] = ['The selected allocation does not belong to the selected node.']

    additional: List[int] = []
    raw_additional = data.get('allocation_additional')
    if raw_additional not in (None, '', []):
        if not isinstance(raw_additional, (list, tuple)):
            raw_additional = [raw_additional]
        for entry in raw_additional:
            value = _to_int(entry)
            if value is None:
                errors['allocation_additional'] = ['The allocation additional entries must be integers.']
                break
            additional.append(value)

    if errors:
        raise ValidationError(errors)

    return node_id, allocation_id, additional


def validate_paypal_request(data: Dict) -> int:
    """amount: required integer between PAYPAL_MIN_AMOUNT and PAYPAL_MAX_AMOUNT credits"""
    raw = data.get('amount')
    if _is_missing(raw):
        raise ValidationError({'amount': ['The amount field is required.']})

    amount = _to_int(raw)
    if amount is None:
        raise ValidationError({'amount': ['The amount must be an integer.']})
    if amount < PAYPAL_MIN_AMOUNT or amount > PAYPAL_MAX_AMOUNT:
        raise ValidationError({
            'amount': [f'The amount must be between {PAYPAL_MIN_AMOUNT} and {PAYPAL_MAX_AMOUNT}.']
        })
    return amount


def validate_purchase_resource(data: Dict) -> str:
    """resource: required|string|in:slot,cpu,memory,disk,port,backup,database"""
    raw = data.get('resource')
    if _is_missing(raw):
        raise ValidationError({'resource': ['The resource field is required.']})
    if not isinstance(raw, str):
        raise ValidationError({'resource': ['The resource must be a string.']})
    if raw not in STORE_RESOURCES:
        raise ValidationError({'resource': ['The selected resource is invalid.']})
    return raw
