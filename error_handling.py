#!/usr/bin/env python3
"""
Structured error handling for the Maze Path Validator HTTP layer
The core never raises on user interaction; these errors cover malformed
requests and unknown sessions only.
"""

import traceback
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from monitoring import MazeLogger


class MazeApiError(Exception):
    status_code = 400
    error = 'Bad request'

    def __init__(self, message: str, status_code: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        payload = {'error': self.error, 'message': self.message}
        if self.details:
            payload['details'] = self.details
        return payload


class InvalidRequestError(MazeApiError):
    status_code = 400
    error = 'Invalid request'


class SessionNotFoundError(MazeApiError):
    status_code = 404
    error = 'Session not found'


class UnknownCommandError(MazeApiError):
    status_code = 404
    error = 'Unknown command'


class SessionBusyError(MazeApiError):
    status_code = 409
    error = 'Session busy'


class FlaskErrorHandler:
    """Flask error handler with structured logging"""

    def __init__(self, app: Flask, logger: MazeLogger):
        self.app = app
        self.logger = logger
        self.setup_handlers()

    def _request_context(self) -> Dict[str, Any]:
        return {
            'request_method': request.method,
            'request_url': request.url,
            'user_agent': request.headers.get('User-Agent'),
        }

    def setup_handlers(self):
        """Setup Flask error handlers"""

        @self.app.errorhandler(MazeApiError)
        def api_error(error):
            if isinstance(error, SessionNotFoundError):
                self.logger.log_session_event('session_not_found', self._request_context())
            elif isinstance(error, SessionBusyError):
                self.logger.log_session_event('session_busy', self._request_context())
            return jsonify(error.to_dict()), error.status_code

        @self.app.errorhandler(HTTPException)
        def http_error(error):
            if error.code >= 500:
                self.logger.log_error(error, self._request_context())
            return jsonify({'error': error.name, 'message': error.description}), error.code

        @self.app.errorhandler(Exception)
        def handle_exception(error):
            """Catch-all exception handler"""
            context = self._request_context()
            context['traceback'] = traceback.format_exc()
            self.logger.log_error(error, context)

            # Don't expose internal errors in production
            if self.app.debug:
                return jsonify({'error': 'Internal error', 'message': str(error),
                                'traceback': context['traceback']}), 500
            return jsonify({'error': 'Internal server error', 'message': 'Something went wrong'}), 500


def setup_error_handling(app: Flask, logger: MazeLogger) -> Flask:
    """Setup error handling for Flask app"""
    FlaskErrorHandler(app, logger)
    return app
