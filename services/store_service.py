#!/usr/bin/env python3
"""
NodeForge Store Service
Spending store credits on extra resources
"""

from typing import Dict

from exceptions import DisplayError
from models.user import STORE_COLUMNS
from services.panel_logger import log_event
from validation import STORE_RESOURCES
from websocket import user_room


SERVICE = "StoreService"

# Credits charged per purchase, overridable with the store:cost:<resource> setting
DEFAULT_COSTS = {
    'cpu': 100,
    'memory': 50,
    'disk': 25,
    'slot': 250,
    'port': 20,
    'backup': 20,
    'database': 20,
}

# Units granted per purchase (cpu in %, memory and disk in MiB)
RESOURCE_AMOUNTS = {
    'cpu': 50,
    'memory': 1024,
    'disk': 1024,
    'slot': 1,
    'port': 1,
    'backup': 1,
    'database': 1,
}


class StoreService:
    """Resource purchases against the user's store balance"""

    def __init__(self, settings, user_model, socketio=None):
        self.settings = settings
        self.user_model = user_model
        self.socketio = socketio

    def get_cost(self, resource: str) -> int:
        return self.settings.get_int(f'store:cost:{resource}', DEFAULT_COSTS[resource])

    def get_costs(self) -> Dict[str, int]:
        return {resource: self.get_cost(resource) for resource in STORE_RESOURCES}

    def purchase_resource(self, user: Dict, resource: str) -> Dict:
        cost = self.get_cost(resource)
        amount = RESOURCE_AMOUNTS[resource]

        if user['store_balance'] < cost:
            raise DisplayError('You do not have enough credits.')

        # The update re-checks the balance, so a concurrent purchase cannot overdraw
        if not self.user_model.purchase_resource(user['id'], resource, cost, amount):
            raise DisplayError('You do not have enough credits.')

        updated = self.user_model.get(user['id'])
        log_event(SERVICE, f"User {user['id']} bought {amount} {resource} for {cost} credits "
                           f"(balance {updated['store_balance']})", icon="🛍️")

        if self.socketio:
            self.socketio.emit('store_balance_updated', {
                'user_id': updated['id'],
                'store_balance': updated['store_balance'],
            }, to=user_room(updated['id']))
        return updated

    def get_summary(self, user: Dict, gateways: Dict[str, bool]) -> Dict:
        return {
            'balance': user['store_balance'],
            'resources': {resource: user[STORE_COLUMNS[resource]] for resource in STORE_RESOURCES},
            'costs': self.get_costs(),
            'amounts': dict(RESOURCE_AMOUNTS),
            'gateways': gateways,
        }
