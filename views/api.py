from flask import Blueprint, current_app, jsonify, request
import logging

from models.generation import GenerationRequest, ValidationError
from helpers.completion import ConfigurationError, TransportError, UpstreamError
from services.generation_service import UsageLimitExceeded

logger = logging.getLogger(__name__)  # Initialize the logger for this module

# Create a blueprint for API routes
bp = Blueprint("api", __name__, url_prefix="/api")


def get_generation_service():
    return current_app.extensions["generation_service"]


def client_identity():
    """Caller network identity: first X-Forwarded-For hop, else the peer address."""
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded.strip():
        return forwarded.split(",")[0].strip()
    return request.remote_addr or "unknown"


def error_response(message, status):
    return jsonify({"ok": False, "error": message}), status


def upstream_status(error):
    status = getattr(error, "status", None)
    if isinstance(status, int) and 400 <= status < 600:
        return status
    return 500


@bp.route("/run", methods=["POST"])
@bp.route("/generate", methods=["POST"])
async def run():
    """Generate ready-to-publish post text for the requested platform(s)."""
    data = request.get_json(silent=True)

    try:
        generation_request = GenerationRequest.from_payload(data)
    except ValidationError as e:
        return error_response(str(e), 400)

    service = get_generation_service()
    identity = client_identity()

    try:
        service.check_usage(identity)
    except UsageLimitExceeded as e:
        return (
            jsonify(
                {
                    "ok": False,
                    "code": "USAGE_LIMIT",
                    "limit": e.limit,
                    "error": str(e),
                }
            ),
            429,
        )

    try:
        output = await service.generate(generation_request)
    except ConfigurationError as e:
        logger.error(f"Generation is not configured: {e}")
        return error_response(str(e), 500)
    except UpstreamError as e:
        logger.error(f"Upstream model error for {identity}: {e}")
        return error_response(str(e) or "Upstream error", upstream_status(e))
    except TransportError as e:
        logger.error(f"Transport failure for {identity}: {e}")
        return error_response(str(e), 500)
    except Exception:
        logger.exception(f"Unexpected error while generating for {identity}")
        return error_response("Server error", 500)

    logger.info(
        f"Generated {', '.join(output.meta.get('platforms', []))} for {identity}"
    )
    return jsonify({"ok": True, "output": output.to_dict()})
