# FILE: ecopack-backend/main.py

import logging
from flask import Flask, jsonify
from dotenv import load_dotenv
from pydantic import ValidationError
from logging_config import setup_logging
from extensions import limiter
from api.error_utils import create_error_response, not_found_error

import dependencies
from eco_assistant import EcoAssistant
from gamification_engine import GamificationEngine
from timezone_utils import get_app_timezone

# --- SETUP & CONFIG ---
load_dotenv()
setup_logging()


def create_app(model_client=None, profile_store=None, config=None, assistant=None, engine=None):
    """
    Build the Flask app. Collaborators default to the ones configured from the
    environment; tests pass their own (or a ready-made assistant/engine).
    """
    app = Flask(__name__)
    app.config["RATELIMIT_STORAGE_URI"] = dependencies.RATELIMIT_STORAGE_URI
    if config:
        app.config.update(config)

    # --- Initialize Extensions ---
    limiter.init_app(app)

    if assistant is None:
        assistant = EcoAssistant(
            model_client if model_client is not None else dependencies.get_model_client(),
            max_attempts=dependencies.MODEL_MAX_ATTEMPTS,
            base_delay_ms=dependencies.MODEL_BASE_DELAY_MS,
            request_budget_seconds=dependencies.MODEL_REQUEST_BUDGET_SECONDS,
        )
    if engine is None:
        engine = GamificationEngine(
            profile_store if profile_store is not None else dependencies.get_profile_store(),
            tz=get_app_timezone(),
        )
    app.extensions["eco_assistant"] = assistant
    app.extensions["gamification_engine"] = engine

    # --- Import and Register Blueprints ---
    from api.core import core_bp
    from api.gamification import gamification_bp
    from api.status import status_bp

    app.register_blueprint(core_bp, url_prefix='/', strict_slashes=False)
    app.register_blueprint(gamification_bp, url_prefix='/', strict_slashes=False)
    app.register_blueprint(status_bp, url_prefix='/', strict_slashes=False)

    # --- Global Error Handlers ---
    @app.errorhandler(ValidationError)
    def handle_validation_error(e):
        return jsonify({"error_code": "BAD_REQUEST", "details": e.errors(include_url=False, include_context=False)}), 400

    @app.errorhandler(404)
    def resource_not_found(e):
        """Handles 404 Not Found errors for a clean API response."""
        return not_found_error("The requested resource was not found.")

    @app.errorhandler(429)
    def rate_limited(e):
        return create_error_response("RATE_LIMITED", f"Too many requests: {e.description}", status_code=429)

    @app.errorhandler(500)
    def internal_server_error(e):
        """Handles unexpected 500 Internal Server Errors for a clean API response."""
        logging.critical(f"An unhandled exception occurred: {e}", exc_info=True)
        return create_error_response("INTERNAL_SERVER_ERROR", status_code=500)

    return app


app = create_app()
