# drama_api/web.py
from flask import Blueprint, request, jsonify, current_app
from werkzeug.exceptions import HTTPException
from drama_api.auth import Unauthorized, require_api_key, API_KEY_HEADER
from drama_api.factory import parse_seed_count
from drama_api.query import DramaQuery
from drama_api.repo import StorageUnavailable
from drama_api.service import DramaService, NotFoundError
import json
import logging

logger = logging.getLogger(__name__)

SERVICE_NAME = "Drama Catalog API"
VERSION = "1.0.0"

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "X-DNS-Prefetch-Control": "off",
    "X-Permitted-Cross-Domain-Policies": "none",
    "Cross-Origin-Opener-Policy": "same-origin",
}

# preflight answers: these methods, plus the requested headers or, when none are
# requested, Content-Type and API_KEY_HEADER (the write routes need both)
CORS_METHODS = "GET,HEAD,PUT,PATCH,POST,DELETE"

bp = Blueprint("dramas", __name__, url_prefix="")

def register_routes(app, service: DramaService):
    """
    Register blueprint and ensure SERVICE is in app.config.
    Call this once during app creation (run.create_app does this).
    """
    if "SERVICE" not in app.config:
        app.config["SERVICE"] = service
    app.register_blueprint(bp)
    app.after_request(add_response_headers)
    logger.debug("Registered blueprint 'dramas' and injected SERVICE")

def register_error_handlers(app):
    """Centralized handlers; every error goes out as a JSON body."""
    @app.errorhandler(Unauthorized)
    def handle_unauthorized(e):
        return jsonify(error="Unauthorized"), 401

    @app.errorhandler(NotFoundError)
    def handle_not_found(e):
        logger.info("NotFoundError: %s", e)
        return jsonify(error="Not found"), 404

    @app.errorhandler(StorageUnavailable)
    def handle_storage(e):
        logger.error("StorageUnavailable: %s", e)
        return jsonify(error="Storage unavailable"), 500

    @app.errorhandler(HTTPException)
    def handle_http(e):
        return jsonify(error=e.name), e.code

def add_response_headers(response):
    origin = current_app.config.get("CORS_ORIGIN", "*")
    response.headers["Access-Control-Allow-Origin"] = origin
    if origin != "*":
        response.vary.add("Origin")
    if request.method == "OPTIONS":
        response.headers["Access-Control-Allow-Methods"] = CORS_METHODS
        response.headers["Access-Control-Allow-Headers"] = (
            request.headers.get("Access-Control-Request-Headers") or f"Content-Type, {API_KEY_HEADER}"
        )
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response

# helper to get service instance
def current_service() -> DramaService:
    return current_app.config["SERVICE"]

def _reject_constant(name):
    raise ValueError(f"non-finite number {name}")

def json_payload():
    """
    Request body as a dict. Invalid JSON, non-object bodies and bodies using
    NaN/Infinity (not valid JSON, and not writable back out as JSON) count as empty.
    """
    if not request.is_json:
        return {}
    try:
        data = json.loads(request.get_data(), parse_constant=_reject_constant)
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}

# -----------------------
# Service info
# -----------------------
@bp.route("/")
def index():
    return jsonify(ok=True, service=SERVICE_NAME, version=VERSION)

# -----------------------
# Dramas
# -----------------------
@bp.route("/api/dramas")
def list_dramas():
    q = DramaQuery.from_args(request.args)
    return jsonify(current_service().list_dramas(q))

@bp.route("/api/dramas/<drama_id>")
def drama_detail(drama_id: str):
    return jsonify(current_service().get_drama(drama_id))

@bp.route("/api/dramas", methods=["POST"])
@require_api_key
def drama_create():
    item = current_service().create_drama(json_payload())
    return jsonify(item), 201

@bp.route("/api/dramas/<drama_id>", methods=["PUT"])
@require_api_key
def drama_update(drama_id: str):
    return jsonify(current_service().update_drama(drama_id, json_payload()))

@bp.route("/api/dramas/<drama_id>", methods=["DELETE"])
@require_api_key
def drama_delete(drama_id: str):
    deleted = current_service().delete_drama(drama_id)
    return jsonify(ok=True, deleted=deleted)

# -----------------------
# Seed
# -----------------------
@bp.route("/api/seed", methods=["POST"])
@require_api_key
def seed():
    count = parse_seed_count(request.args.get("count"))
    added = current_service().seed_dramas(count)
    return jsonify(ok=True, added=added)
