#!/usr/bin/env python3
"""
NodeForge PayPal Service
Store credit purchases through the PayPal Orders v2 REST API
"""

import time
import uuid
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional, Tuple

import requests

from exceptions import DisplayError
from services.panel_logger import log_event, log_state_change
from websocket import user_room


SERVICE = "PayPalService"

LIVE_API_BASE = "https://api-m.paypal.com"
SANDBOX_API_BASE = "https://api-m.sandbox.paypal.com"


class PayPalHttpError(Exception):
    """PayPal answered with a non-success status"""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"PayPal returned HTTP {status_code}: {body[:200]}")
        self.status_code = status_code
        self.body = body


class PayPalClient:
    """Minimal PayPal REST client with a cached client-credentials token"""

    def __init__(self, client_id: str, client_secret: str, mode: str = "live", timeout: float = 15):
        self.client_id = client_id
        self.client_secret = client_secret
        self.base_url = SANDBOX_API_BASE if mode == "sandbox" else LIVE_API_BASE
        self.timeout = timeout
        self._access_token: Optional[str] = None
        self._token_expires_at = 0.0

    def _get_access_token(self) -> str:
        if self._access_token and time.time() < self._token_expires_at:
            return self._access_token

        response = requests.post(
            f"{self.base_url}/v1/oauth2/token",
            auth=(self.client_id, self.client_secret),
            data={'grant_type': 'client_credentials'},
            headers={'Accept': 'application/json'},
            timeout=self.timeout,
        )
        if response.status_code != 200:
            raise PayPalHttpError(response.status_code, response.text)

        data = response.json()
        self._access_token = data['access_token']
        # Refresh a minute early
        self._token_expires_at = time.time() + int(data.get('expires_in', 0)) - 60
        return self._access_token

    def execute(self, method: str, path: str, body: Optional[Dict] = None) -> Tuple[int, Dict]:
        """Send an authenticated request asking for the full resource representation"""
        response = requests.request(
            method,
            f"{self.base_url}{path}",
            json=body,
            headers={
                'Authorization': f"Bearer {self._get_access_token()}",
                'Content-Type': 'application/json',
                'Prefer': 'return=representation',
            },
            timeout=self.timeout,
        )
        if response.status_code not in (200, 201):
            raise PayPalHttpError(response.status_code, response.text)
        return response.status_code, response.json()

    def create_order(self, body: Dict) -> Dict:
        _, result = self.execute('POST', '/v2/checkout/orders', body)
        return result

    def capture_order(self, order_id: str) -> Tuple[int, Dict]:
        return self.execute('POST', f"/v2/checkout/orders/{order_id}/capture")


class PayPalService:
    """Creates PayPal orders for store credits and credits users once captured"""

    def __init__(self, config, settings, user_model, payment_model, socketio=None):
        self.config = config
        self.settings = settings
        self.user_model = user_model
        self.payment_model = payment_model
        self.socketio = socketio
        self._client: Optional[PayPalClient] = None

    def get_client(self) -> PayPalClient:
        """PayPal client built from the gateway credentials"""
        if self._client is None:
            self._client = PayPalClient(
                self.config.get('PAYPAL_CLIENT_ID'),
                self.config.get('PAYPAL_CLIENT_SECRET'),
                mode=self.config.get('PAYPAL_MODE', 'live').lower(),
            )
        return self._client

    def is_enabled(self) -> bool:
        return self.settings.get('store:paypal:enabled') == 'true'

    def calculate_cost(self, amount: int) -> Decimal:
        """Price of `amount` credits; PAYPAL_COST is the price of 100 credits"""
        cost_per_hundred = Decimal(str(self.config.get_float('PAYPAL_COST', 1)))
        return (cost_per_hundred / 100 * amount).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)

    def _app_name(self) -> str:
        return self.settings.get('app:name') or self.config.get('APP_NAME', 'NodeForge')

    def build_order(self, amount: int, cost: Decimal, currency: str, reference_id: str,
                    return_url: str, cancel_url: str) -> Dict:
        app_name = self._app_name()
        value = str(cost)
        return {
            'intent': 'CAPTURE',
            'purchase_units': [
                {
                    'reference_id': reference_id,
                    'description': f"{amount} Credits | {app_name}",
                    'amount': {
                        'value': value,
                        'currency_code': currency,
                        'breakdown': {
                            'item_total': {'currency_code': currency, 'value': value},
                        },
                    },
                }
            ],
            'application_context': {
                'cancel_url': cancel_url,
                'return_url': return_url,
                'brand_name': app_name,
                'shipping_preference': 'NO_SHIPPING',
            },
        }

    def purchase(self, user: Dict, amount: int, return_url: str, cancel_url: str) -> str:
        """Create a PayPal order for `amount` credits and return the buyer approval URL"""
        if not self.is_enabled():
            raise DisplayError('Unable to purchase via PayPal: module not enabled')

        cost = self.calculate_cost(amount)
        currency = self.config.get('GATEWAY_CURRENCY', 'USD').upper()
        reference_id = uuid.uuid4().hex[:13]
        order = self.build_order(amount, cost, currency, reference_id, return_url, cancel_url)

        try:
            result = self.get_client().create_order(order)
        except (PayPalHttpError, requests.RequestException, KeyError, ValueError) as e:
            log_event(SERVICE, f"Order creation failed for user {user['id']}: {e}", icon="❌")
            raise DisplayError('Unable to process order.') from e

        approve_url = self._find_link(result, ('approve', 'payer-action'))
        if not result.get('id') or not approve_url:
            log_event(SERVICE, f"Order response without id/approval link: {result}", icon="❌")
            raise DisplayError('Unable to process order.')

        self.payment_model.create({
            'payment_id': result['id'],
            'reference_id': reference_id,
            'user_id': user['id'],
            'gateway': 'paypal',
            'credits': amount,
            'cost': cost,
            'currency': currency,
        })
        log_event(SERVICE, f"Order created: {amount} credits for {cost} {currency} (user {user['id']})",
                  icon="🛒", payment_id=result['id'])
        return approve_url

    @staticmethod
    def _find_link(result: Dict, rels) -> Optional[str]:
        for link in result.get('links', []):
            if link.get('rel') in rels:
                return link.get('href')
        return None

    def capture(self, order_id: str) -> Dict:
        """
        Capture an approved order and credit the buyer.
        Idempotent: a payment that is no longer pending is never credited twice.
        """
        payment = self.payment_model.get(order_id) if order_id else None
        if not payment:
            raise DisplayError('Unable to process order.')
        if payment['status'] != 'pending':
            log_event(SERVICE, f"Payment already {payment['status']}, skipping capture", icon="⏭️",
                      payment_id=order_id)
            if payment['status'] == 'completed':
                return payment
            raise DisplayError('Unable to process order.')

        try:
            status_code, result = self.get_client().capture_order(order_id)
        except (PayPalHttpError, requests.RequestException, KeyError, ValueError) as e:
            log_event(SERVICE, f"Capture failed: {e}", icon="❌", payment_id=order_id)
            raise DisplayError('Unable to process order.') from e

        units = result.get('purchase_units') or [{}]
        if status_code not in (200, 201) or result.get('status') != 'COMPLETED' \
                or units[0].get('reference_id', payment['reference_id']) != payment['reference_id']:
            self.payment_model.set_status_if_pending(order_id, 'failed')
            log_state_change(SERVICE, 'pending', 'failed', payment_id=order_id)
            raise DisplayError('Unable to process order.')

        if self.payment_model.complete_and_credit(order_id):
            log_state_change(SERVICE, 'pending', 'completed', payment_id=order_id)
            user = self.user_model.get(payment['user_id'])
            if self.socketio and user:
                self.socketio.emit('store_balance_updated', {
                    'user_id': user['id'],
                    'store_balance': user['store_balance'],
                }, to=user_room(user['id']))
        return self.payment_model.get(order_id)

    def cancel(self, order_id: Optional[str]) -> bool:
        if not order_id:
            return False
        cancelled = self.payment_model.set_status_if_pending(order_id, 'cancelled')
        if cancelled:
            log_state_change(SERVICE, 'pending', 'cancelled', payment_id=order_id)
        return cancelled
