#!/usr/bin/env python3
"""
NodeForge Authentication Module
JWT-based authentication for panel users and bearer-token authentication for node daemons
"""

import functools
import hmac
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple, Dict, Any

import jwt
from flask import request, jsonify, g
from werkzeug.security import check_password_hash


# ===== CONFIGURATION =====

# Set by init_auth() from app.py
_config = None
_user_model = None
_node_model = None


def init_auth(config, user_model, node_model):
    """Initialize auth dependencies"""
    global _config, _user_model, _node_model
    _config = config
    _user_model = user_model
    _node_model = node_model


def get_auth_config() -> Dict[str, Any]:
    """Get authentication configuration"""
    return {
        'jwt_secret': _config.get('JWT_SECRET_KEY', _config.get('SECRET_KEY', 'nodeforge-jwt-secret-change-me')),
        'jwt_expiry_hours': _config.get_int('JWT_EXPIRY_HOURS', 24),
        'jwt_algorithm': 'HS256'
    }


# ===== PASSWORD VERIFICATION =====

def verify_credentials(username: str, password: str) -> Optional[Dict]:
    """Return the user row when username and password match"""
    user = _user_model.get_by_username(username)
    if not user:
        return None
    if not check_password_hash(user['password_hash'], password):
        return None
    return user


# ===== JWT TOKEN MANAGEMENT =====

def _encode(user: Dict, token_type: str, expiry: datetime) -> str:
    config = get_auth_config()
    payload = {
        'sub': str(user['id']),
        'username': user['username'],
        'iat': datetime.now(timezone.utc),
        'exp': expiry,
        'type': token_type
    }
    return jwt.encode(payload, config['jwt_secret'], algorithm=config['jwt_algorithm'])


def generate_token(user: Dict) -> Tuple[str, datetime]:
    """
    Generate an access token for an authenticated user.
    Returns tuple of (token, expiry_datetime)
    """
    config = get_auth_config()
    expiry = datetime.now(timezone.utc) + timedelta(hours=config['jwt_expiry_hours'])
    return _encode(user, 'access', expiry), expiry


def generate_refresh_token(user: Dict) -> Tuple[str, datetime]:
    """Refresh token lasts 7 days"""
    expiry = datetime.now(timezone.utc) + timedelta(days=7)
    return _encode(user, 'refresh', expiry), expiry


def validate_token(token: str, token_type: str = 'access') -> Optional[Dict[str, Any]]:
    """
    Validate a JWT token and return the payload if valid.
    Returns None if token is invalid or expired.
    """
    config = get_auth_config()

    try:
        payload = jwt.decode(
            token,
            config['jwt_secret'],
            algorithms=[config['jwt_algorithm']]
        )

        if payload.get('type') != token_type:
            print(f"⚠️  Token type mismatch: expected {token_type}, got {payload.get('type')}")
            return None

        return payload

    except jwt.ExpiredSignatureError:
        print("⚠️  Token has expired")
        return None
    except jwt.InvalidTokenError as e:
        print(f"⚠️  Invalid token: {e}")
        return None


def get_token_from_request() -> Optional[str]:
    """Extract the bearer token from the Authorization header"""
    auth_header = request.headers.get('Authorization', '')
    if auth_header.startswith('Bearer '):
        return auth_header[7:]
    return None


def get_token_remaining_time(token: str) -> Optional[int]:
    """Seconds left before the token expires, None if invalid"""
    config = get_auth_config()

    try:
        payload = jwt.decode(
            token,
            config['jwt_secret'],
            algorithms=[config['jwt_algorithm']],
            options={'verify_exp': False}
        )
        exp = payload.get('exp')
        if exp:
            remaining = exp - datetime.now(timezone.utc).timestamp()
            return max(0, int(remaining))
        return None

    except jwt.InvalidTokenError:
        return None


def _user_from_payload(payload: Optional[Dict[str, Any]]) -> Optional[Dict]:
    if not payload:
        return None
    try:
        return _user_model.get(int(payload.get('sub')))
    except (TypeError, ValueError):
        return None


# ===== ROUTE PROTECTION DECORATORS =====

def require_auth(f):
    """
    Decorator to protect routes requiring authentication.
    Sets g.current_user with the authenticated user row.
    """
    @functools.wraps(f)
    def decorated_function(*args, **kwargs):
        token = get_token_from_request()

        if not token:
            return jsonify({
                'status': 'error',
                'message': 'Authentication required',
                'code': 'AUTH_REQUIRED'
            }), 401

        payload = validate_token(token, token_type='access')
        user = _user_from_payload(payload)

        if not user:
            return jsonify({
                'status': 'error',
                'message': 'Invalid or expired token',
                'code': 'INVALID_TOKEN'
            }), 401

        g.current_user = user
        g.token_payload = payload

        return f(*args, **kwargs)

    return decorated_function


def require_admin(f):
    """Decorator for root-admin only routes (implies require_auth)"""
    @functools.wraps(f)
    @require_auth
    def decorated_function(*args, **kwargs):
        if not g.current_user.get('root_admin'):
            return jsonify({
                'status': 'error',
                'message': 'This action requires administrator privileges',
                'code': 'FORBIDDEN'
            }), 403
        return f(*args, **kwargs)

    return decorated_function


def require_daemon_auth(f):
    """
    Decorator for daemon callback routes.
    Expects 'Authorization: Bearer <daemon_token_id>.<daemon_token>' and sets g.node.
    """
    @functools.wraps(f)
    def decorated_function(*args, **kwargs):
        token = get_token_from_request() or ''
        token_id, _, secret = token.partition('.')

        node = _node_model.get_by_daemon_token_id(token_id) if token_id and secret else None
        if not node or not hmac.compare_digest(secret, node['daemon_token']):
            return jsonify({
                'status': 'error',
                'message': 'The daemon token provided is not valid',
                'code': 'INVALID_DAEMON_TOKEN'
            }), 403

        g.node = node
        return f(*args, **kwargs)

    return decorated_function


# ===== WEBSOCKET AUTHENTICATION =====

def validate_websocket_token(auth_data: Dict[str, Any]) -> Optional[Dict]:
    """
    Validate token from WebSocket connection auth data.
    Returns the user if valid, None otherwise.
    """
    token = auth_data.get('token') if auth_data else None

    if not token:
        return None

    return _user_from_payload(validate_token(token, token_type='access'))
