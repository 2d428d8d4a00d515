#!/usr/bin/env python3
"""
NodeForge Panel Exceptions
Errors raised by services and mapped to HTTP responses by app.py
"""

from typing import Dict, List, Optional


class PanelError(Exception):
    """Base class for errors that carry an HTTP status code"""

    status_code = 500
    code = 'PANEL_ERROR'

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict:
        return {'status': 'error', 'message': self.message, 'code': self.code}


class DisplayError(PanelError):
    """Error whose message is safe to show to the end user"""

    status_code = 400
    code = 'DISPLAY_ERROR'


class DaemonConnectionError(PanelError):
    """The node daemon could not be reached or returned an error"""

    status_code = 502
    code = 'DAEMON_CONNECTION_ERROR'

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ServerStateConflictError(PanelError):
    """The server is in a state that does not allow the requested action"""

    status_code = 409
    code = 'SERVER_STATE_CONFLICT'

    def __init__(self, server: Dict):
        super().__init__(
            'This server is currently in an unsupported state, please try again later.'
        )
        self.server_id = server.get('id')


class ValidationError(PanelError):
    """Request data failed validation rules"""

    status_code = 422
    code = 'VALIDATION_ERROR'

    def __init__(self, errors: Dict[str, List[str]]):
        super().__init__('The given data was invalid.')
        self.errors = errors

    def to_dict(self) -> Dict:
        data = super().to_dict()
        data['errors'] = self.errors
        return data
