import hmac
import logging
import sys

# Configure logging to output to STDOUT with a more detailed format
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

from flask import Flask, Response, request

from extensions import cors, redis_client
from cli import generate_command, usage_command
from config import Config
from helpers.completion import get_completion_client
from services.generation_service import GenerationService
from services.usage_store import create_usage_store

# Import blueprints from views package
from views.main import bp as main_bp
from views.api import bp as api_bp

# Paths reachable without the preview password
PUBLIC_PATHS = {"/health"}


def _credentials_match(auth, username, password):
    if auth is None or auth.type != "basic":
        return False
    return hmac.compare_digest(auth.username or "", username) and hmac.compare_digest(
        auth.password or "", password
    )


def create_app(test_config=None):
    """Create and configure the Flask application."""
    app = Flask(__name__)

    # Load configuration from config.py
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    app.json.ensure_ascii = False

    # CORS: a single allowed origin when configured, otherwise open
    origin = app.config.get("FRONTEND_ORIGIN") or "*"
    cors.init_app(app, origins=origin, methods=["GET", "POST"])

    # Redis is only connected when it backs the usage counters
    redis_client.init_app(app)
    app.redis_client = redis_client

    usage_store = create_usage_store(app.config.get("USAGE_STORE"), redis_client)
    completion_client = get_completion_client(app.config)
    app.extensions["generation_service"] = GenerationService.from_config(
        app.config, completion_client, usage_store
    )

    app.logger.info(
        f"Model: {app.config.get('GEMINI_MODEL')}, "
        f"strategy: {app.config.get('GENERATION_STRATEGY')}, "
        f"daily limit: {app.config.get('DAILY_USAGE_LIMIT') or 'off'}"
    )

    # Register blueprints
    app.register_blueprint(api_bp, url_prefix="/api")  # API routes
    app.register_blueprint(main_bp)  # Pages and health check

    # Register CLI commands
    app.cli.add_command(generate_command)
    app.cli.add_command(usage_command)

    @app.before_request
    def preview_gate():
        username = app.config.get("PREVIEW_USER")
        password = app.config.get("PREVIEW_PASSWORD")
        if not (username and password) or request.path in PUBLIC_PATHS:
            return None
        if request.method == "OPTIONS":
            return None
        if _credentials_match(request.authorization, username, password):
            return None
        return Response(
            "Authentication required",
            401,
            {"WWW-Authenticate": 'Basic realm="Nashr Preview"'},
        )

    return app


if __name__ == "__main__":
    app = create_app()
    app.logger.info(f"Nashr server running on port {app.config['PORT']}")
    app.run(host="0.0.0.0", port=app.config["PORT"])
