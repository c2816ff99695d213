"""
Small Flask server with the CORS policy middleware in front of it.
Useful for checking a policy from a browser or with cors_check.py.
"""

import os
import sys
import logging
from flask import Flask, jsonify

from cors_middleware import apply_cors
from cors_settings import cors_enabled, load_policy_config

logger = logging.getLogger(__name__)


def create_app(config=None):
    """Create the Flask app and wrap its WSGI callable with the CORS policy."""
    app = Flask(__name__)

    @app.route('/')
    def hello():
        return jsonify({"message": "Server is running correctly."})

    @app.route('/health')
    def health():
        return jsonify({"status": "ok"})

    if config is None:
        if not cors_enabled():
            logger.info("CORS_ENABLED is false, serving without CORS middleware")
            return app
        config = load_policy_config()

    app.wsgi_app = apply_cors(app.wsgi_app, config)
    logger.info(f"CORS middleware applied for origins: {sorted(config.allowed_origins)}")
    return app


if __name__ == '__main__':
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )
    port = int(os.environ.get('PORT', 8000))
    logger.info(f"Starting server on port {port}")
    create_app().run(host='0.0.0.0', port=port)
