"""Public pages: generation form and history."""
from flask import render_template, request
from app.blueprints.public import public_bp
from app.models.generation import Generation
from app.services import generation_service


@public_bp.route("/")
def index():
    """Prompt form plus the most recent generations."""
    limit = min(max(request.args.get("limit", 20, type=int) or 20, 1), 100)
    rows = generation_service.list_generations(limit=limit)
    return render_template(
        "index.html",
        generations=rows,
        styles=sorted(Generation.STYLES),
        templates=sorted(Generation.TEMPLATES),
    )
