"""JSON API: generate components and manage stored generations."""
import logging
from dataclasses import asdict
from flask import jsonify, request, send_from_directory
from app import extensions
from app.blueprints.api import api_bp
from app.services import generation_service, image_service, orchestrator, storage_service

logger = logging.getLogger(__name__)

MAX_LIST_LIMIT = 100


def _error(message, status, details=None):
    body = {"error": message}
    if details:
        body["details"] = details
    return jsonify(body), status


def _read_generate_input():
    """Return (data, upload) from a JSON or multipart request."""
    if request.files or request.form:
        data = request.form.to_dict()
        file = request.files.get("reference_image")
        upload = None
        if file and file.filename:
            upload = (file.read(), file.mimetype)
        return data, upload
    data = request.get_json(silent=True)
    return (data if isinstance(data, dict) else {}), None


def _truthy(value):
    if isinstance(value, bool):
        return value
    return str(value).lower() in ("1", "true", "yes", "on")


@api_bp.route("/api/generate", methods=["POST"])
def generate():
    """Generate a component from a prompt (optionally with a reference image).

    Input errors are rejected before a record exists or the API is called.
    """
    data, upload = _read_generate_input()
    try:
        generation_request = orchestrator.build_request(data, upload=upload)
    except ValueError as e:
        logger.info("Rejected generate request: %s", e)
        return _error(str(e), 400)

    try:
        orchestrator.ensure_configured()
    except orchestrator.ConfigurationError as e:
        return _error(str(e), 500, details="configuration")

    if _truthy(data.get("async", False)):
        return _enqueue(generation_request)

    try:
        outcome = orchestrator.generate(generation_request)
    except Exception:
        logger.exception("Generation request crashed")
        return _error("Internal server error", 500)
    return jsonify(outcome.to_response()), outcome.http_status


def _enqueue(generation_request):
    from app.workers.generation import generate_component

    generation = generation_service.create_generation(
        generation_request.prompt,
        style=generation_request.style,
        template=generation_request.template,
    )
    job = extensions.task_queue.enqueue(
        generate_component, generation.id, asdict(generation_request)
    )
    if job is None:
        # No queue (Redis absent): run inline so the record still settles
        logger.info("No task queue, running generation %s inline", generation.id)
        generate_component(generation.id, asdict(generation_request))
    return jsonify({"id": generation.id, "status": "pending"}), 202


@api_bp.route("/api/generations", methods=["GET"])
def list_generations():
    try:
        limit = int(request.args.get("limit", 10))
    except ValueError:
        limit = 0
    if limit < 1 or limit > MAX_LIST_LIMIT:
        return _error(f"limit must be between 1 and {MAX_LIST_LIMIT}", 400)

    rows = generation_service.list_generations(limit=limit)
    generations = [
        generation.to_dict(asset_count=asset_count) for generation, asset_count in rows
    ]
    return jsonify({"generations": generations, "total": len(generations)})


@api_bp.route("/api/generations", methods=["DELETE"])
def delete_all_generations():
    deleted, files_deleted, files_failed = generation_service.delete_all_generations()
    return jsonify(
        {
            "success": True,
            "deleted": deleted,
            "deletedFiles": files_deleted,
            "failedFiles": files_failed,
        }
    )


@api_bp.route("/api/generations/<generation_id>", methods=["GET"])
def get_generation(generation_id):
    generation = generation_service.get_generation(generation_id, include_assets=True)
    if not generation:
        return _error("Generation not found", 404)
    return jsonify(generation.to_dict(include_assets=True))


@api_bp.route("/api/generations/<generation_id>", methods=["DELETE"])
def delete_generation(generation_id):
    deleted, files_deleted, files_failed = generation_service.delete_generation(
        generation_id
    )
    if not deleted:
        return _error("Generation not found", 404)
    return jsonify(
        {
            "success": True,
            "id": generation_id,
            "deletedFiles": files_deleted,
            "failedFiles": files_failed,
        }
    )


@api_bp.route("/api/generations/<generation_id>/screenshot", methods=["POST"])
def upload_screenshot(generation_id):
    """Attach a PNG screenshot of the rendered preview."""
    generation = generation_service.get_generation(generation_id)
    if not generation:
        return _error("Generation not found", 404)

    file = request.files.get("screenshot")
    if not file:
        return _error("A 'screenshot' file is required", 400)
    try:
        png_bytes = image_service.prepare_screenshot(file.read())
    except ValueError as e:
        return _error(str(e), 400)

    asset = generation_service.add_screenshot(generation, png_bytes)
    logger.info("Screenshot stored for %s at %s", generation_id, asset.path)
    return jsonify({"asset": asset.to_dict(), "screenshot_url": generation.screenshot_url}), 201


@api_bp.route("/screenshots/<path:filename>")
def screenshot_file(filename):
    directory = storage_service.local_path("screenshots")
    return send_from_directory(directory, filename)
