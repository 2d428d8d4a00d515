#!/usr/bin/env python3
"""
NodeForge Authentication Routes
Handles login, token verification, refresh and the current-user lookup
"""

from flask import Blueprint, jsonify, request, g
from auth import (
    verify_credentials,
    generate_token,
    generate_refresh_token,
    validate_token,
    get_token_from_request,
    require_auth,
    get_token_remaining_time,
)
from models.user import User

auth_bp = Blueprint('auth', __name__)

# Global references to be set by app.py
user_model = None


def init_auth_routes(app_user_model):
    """Initialize route dependencies"""
    global user_model
    user_model = app_user_model


@auth_bp.route('/auth/login', methods=['POST'])
def api_login():
    """
    Authenticate user and return JWT tokens.

    Request body:
    {
        "username": "admin",
        "password": "your-password"
    }
    """
    if not request.is_json:
        return jsonify({
            'status': 'error',
            'message': 'Content-Type must be application/json',
            'code': 'INVALID_CONTENT_TYPE'
        }), 400

    data = request.get_json(silent=True) or {}
    username = str(data.get('username', '')).strip()
    password = data.get('password', '')

    if not username or not password:
        return jsonify({
            'status': 'error',
            'message': 'Username and password are required',
            'code': 'MISSING_CREDENTIALS'
        }), 400

    user = verify_credentials(username, password)
    if not user:
        print(f"🔒 Failed login attempt for user: {username}")
        return jsonify({
            'status': 'error',
            'message': 'Invalid username or password',
            'code': 'INVALID_CREDENTIALS'
        }), 401

    access_token, access_expiry = generate_token(user)
    refresh_token, refresh_expiry = generate_refresh_token(user)

    print(f"✅ User '{username}' logged in successfully")

    return jsonify({
        'status': 'success',
        'message': 'Login successful',
        'token': access_token,
        'refresh_token': refresh_token,
        'expires_at': access_expiry.isoformat(),
        'refresh_expires_at': refresh_expiry.isoformat(),
        'user': User.to_public(user)
    })


@auth_bp.route('/auth/verify', methods=['GET'])
def api_verify():
    """Verify if current token is valid"""
    token = get_token_from_request()

    if not token:
        return jsonify({
            'status': 'success',
            'valid': False,
            'message': 'No token provided'
        })

    payload = validate_token(token, token_type='access')

    if not payload:
        return jsonify({
            'status': 'success',
            'valid': False,
            'message': 'Token is invalid or expired'
        })

    return jsonify({
        'status': 'success',
        'valid': True,
        'user': payload.get('username'),
        'remaining_seconds': get_token_remaining_time(token)
    })


@auth_bp.route('/auth/refresh', methods=['POST'])
def api_refresh():
    """Refresh access token using refresh token"""
    data = request.get_json(silent=True) or {}
    refresh_token = data.get('refresh_token')

    if not refresh_token:
        return jsonify({
            'status': 'error',
            'message': 'Refresh token is required',
            'code': 'MISSING_REFRESH_TOKEN'
        }), 400

    payload = validate_token(refresh_token, token_type='refresh')
    user = user_model.get(int(payload['sub'])) if payload else None

    if not user:
        return jsonify({
            'status': 'error',
            'message': 'Invalid or expired refresh token',
            'code': 'INVALID_REFRESH_TOKEN'
        }), 401

    access_token, access_expiry = generate_token(user)

    print(f"🔄 Token refreshed for user: {user['username']}")

    return jsonify({
        'status': 'success',
        'message': 'Token refreshed successfully',
        'token': access_token,
        'expires_at': access_expiry.isoformat(),
        'user': user['username']
    })


@auth_bp.route('/auth/me', methods=['GET'])
@require_auth
def api_me():
    """Get the authenticated user"""
    return jsonify({'status': 'success', 'user': User.to_public(g.current_user)})
