#!/usr/bin/env python3
"""
NodeForge Store Routes
Store overview, PayPal credit purchases and resource purchases
"""

from flask import Blueprint, jsonify, request, g, flash, redirect, url_for
from auth import require_auth
from exceptions import DisplayError
from models.user import User
from validation import validate_paypal_request, validate_purchase_resource

store_bp = Blueprint('store', __name__)

# Global references to be set by app.py
config = None
coordinator = None


def init_store_routes(app_config, app_coordinator):
    """Initialize route dependencies"""
    global config, coordinator
    config = app_config
    coordinator = app_coordinator


def _request_data():
    """JSON object or form body; anything else validates as empty"""
    data = request.get_json(silent=True) if request.is_json else request.form.to_dict()
    return data if isinstance(data, dict) else {}


def _store_redirect():
    return redirect(config.get('STORE_REDIRECT_URL', '/store'))


@store_bp.route('', methods=['GET'])
@require_auth
def api_store():
    """Balance, owned resources, resource costs and enabled gateways"""
    summary = coordinator.store_service.get_summary(g.current_user, coordinator.get_enabled_gateways())
    return jsonify({"status": "success", "store": summary})


@store_bp.route('/paypal', methods=['POST'])
@require_auth
def api_paypal_purchase():
    """Create a PayPal order and return the approval URL the buyer is sent to"""
    data = _request_data()
    amount = validate_paypal_request(data)

    approve_url = coordinator.paypal_service.purchase(
        g.current_user,
        amount,
        return_url=url_for('store.api_paypal_success', _external=True),
        cancel_url=url_for('store.api_paypal_cancel', _external=True),
    )
    return jsonify(approve_url), 200


@store_bp.route('/paypal/success', methods=['GET'])
def api_paypal_success():
    """PayPal return URL: capture the order and credit the buyer"""
    try:
        coordinator.paypal_service.capture(request.args.get('token'))
        flash('Your purchase was successful and credits have been added to your balance.', 'success')
    except DisplayError as e:
        flash(e.message, 'danger')
    return _store_redirect()


@store_bp.route('/paypal/cancel', methods=['GET'])
def api_paypal_cancel():
    """PayPal cancel URL"""
    coordinator.paypal_service.cancel(request.args.get('token'))
    flash('The payment was cancelled.', 'info')
    return _store_redirect()


@store_bp.route('/resources', methods=['POST'])
@require_auth
def api_purchase_resource():
    """Spend store credits on a resource"""
    data = _request_data()
    resource = validate_purchase_resource(data)

    user = coordinator.store_service.purchase_resource(g.current_user, resource)
    return jsonify({
        "status": "success",
        "message": f"Purchased {resource} successfully",
        "user": User.to_public(user)
    })
