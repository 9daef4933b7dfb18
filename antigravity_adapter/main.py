"""Flask application entrypoint."""

import hmac
import logging
import os
from functools import wraps

from flask import Flask, jsonify, request
from pydantic import ValidationError

from .config import ConfigManager
from .format_converter import AntigravityConverter
from .utils import get_default_ip


logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

PROJECT_HEADER = "X-Antigravity-Project"
SESSION_HEADER = "X-Antigravity-Session"
SAMPLING_KEYS = ("top_p", "top_k", "temperature", "max_tokens")


config_manager = ConfigManager()
converter = AntigravityConverter(config_manager.config)

app = Flask(__name__)


def _error_response(message: str, code: int):
    return (
        jsonify(
            {
                "error": {
                    "message": message,
                    "type": "invalid_request_error",
                    "code": code,
                }
            }
        ),
        code,
    )


def _extract_gateway_api_key() -> str:
    """Extract gateway API key from common request locations."""
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip()

    header_value = request.headers.get("x-api-key")
    if header_value:
        return header_value.strip()

    query_key = request.args.get("key")
    if query_key:
        return query_key.strip()

    return ""


def require_api_key(func):
    """Route decorator for optional gateway API key auth."""

    @wraps(func)
    def decorated_function(*args, **kwargs):
        gateway_api_key = config_manager.config.api_key
        if gateway_api_key:
            provided_key = _extract_gateway_api_key()
            if not provided_key:
                return _error_response("Missing API key", 401)
            if not hmac.compare_digest(provided_key, gateway_api_key):
                return _error_response("Invalid API key", 401)

        return func(*args, **kwargs)

    return decorated_function


@app.route("/health", methods=["GET"])
def health_check():
    return jsonify({"status": "healthy", "version": "1.0.0"})


@app.route("/v1/antigravity/request", methods=["POST"])
@require_api_key
def build_antigravity_request():
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return _error_response("Request body must be a JSON object", 400)

    model = body.get("model")
    if not isinstance(model, str) or not model.strip():
        return _error_response("Field 'model' is required", 400)

    token = {
        "projectId": request.headers.get(PROJECT_HEADER, ""),
        "sessionId": request.headers.get(SESSION_HEADER, ""),
    }
    parameters = {key: body.get(key) for key in SAMPLING_KEYS}
    try:
        envelope = converter.generate_request_body(
            body.get("messages") or [],
            model.strip(),
            parameters,
            body.get("tools"),
            token,
        )
    except ValidationError as exc:
        logger.warning("Rejected request for model %s: %s", model, exc)
        return _error_response(
            f"Missing routing identifiers: set {PROJECT_HEADER} and {SESSION_HEADER}",
            400,
        )
    return jsonify(envelope)


@app.route("/admin/reload", methods=["POST"])
@require_api_key
def reload_config():
    global converter
    try:
        config_manager.reload()
        converter = AntigravityConverter(config_manager.config)
        return jsonify({"status": "ok", "message": "Configuration reloaded"})
    except Exception as exc:
        return jsonify({"status": "error", "message": str(exc)}), 500


if __name__ == "__main__":
    port = int(os.getenv("PORT", "6010"))
    logger.info("Antigravity adapter listening on http://%s:%s", get_default_ip(), port)
    app.run(host="0.0.0.0", port=port, debug=os.getenv("FLASK_DEBUG", "false").lower() in ("1", "true", "yes", "on"))
