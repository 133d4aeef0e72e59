from flask import Blueprint

preview_bp = Blueprint("preview", __name__)

from app.blueprints.preview import views  # noqa: F401, E402
