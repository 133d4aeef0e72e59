"""Preview pages: render stored or live component source."""
import logging
from concurrent.futures import TimeoutError as FutureTimeoutError
from flask import abort, current_app, jsonify, render_template, request
from app.blueprints.preview import preview_bp
from app.sandbox import get_renderer, resolve_isolation
from app.sandbox.session import sessions
from app.services import generation_service

logger = logging.getLogger(__name__)


@preview_bp.route("/preview/<generation_id>")
def show(generation_id):
    """Host page for a completed generation's live preview."""
    generation = generation_service.get_generation(generation_id)
    if not generation or generation.status != "completed":
        abort(404)

    try:
        isolation = resolve_isolation(request.args.get("isolation"))
        renderer = get_renderer(isolation)
    except ValueError as e:
        abort(400, description=str(e))

    result = renderer.render(generation.code, generation.css)
    if not result.ok:
        logger.warning(
            "Preview for %s rendered with error: %s", generation_id, result.error.message
        )
    return render_template(
        "preview.html",
        generation=generation,
        result=result,
        isolation=isolation,
        allow_inpage=isolation == "inpage" or current_app.config["PREVIEW_ALLOW_INPAGE"],
    )


@preview_bp.route("/preview/live", methods=["POST"])
def live():
    """Re-render a live session with new source.

    Only the newest input of a session is answered with a result; a request
    overtaken by a newer one gets 409.
    """
    data = request.get_json(silent=True) or {}
    session_id = data.get("session")
    if not isinstance(session_id, str) or not session_id:
        return jsonify({"error": "A session id is required"}), 400

    try:
        isolation = resolve_isolation(data.get("isolation"))
        get_renderer(isolation)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    session = sessions.get(
        f"{session_id}:{isolation}", lambda: get_renderer(isolation)
    )
    input_id, future = session.mount(data.get("code"), data.get("css"))
    try:
        result = future.result(timeout=current_app.config["PREVIEW_RENDER_TIMEOUT"])
    except FutureTimeoutError:
        logger.warning("Live preview %s input %d timed out", session_id, input_id)
        return jsonify({"error": "Preview render timed out", "input": input_id}), 504

    if not session.is_current(input_id):
        return jsonify({"error": "Superseded by a newer input", "input": input_id}), 409

    body = result.to_dict()
    body["input"] = input_id
    return jsonify(body)
