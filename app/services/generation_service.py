"""Persistence operations for generation records and their assets."""
import logging
import uuid
from app.extensions import db
from app.models.generation import Generation
from app.models.asset import Asset
from app.services import storage_service

logger = logging.getLogger(__name__)


def create_generation(prompt, style="default", template=None):
    """Create a record in the ``pending`` state."""
    generation = Generation(
        prompt=prompt, style=style, template=template, code="", status="pending"
    )
    db.session.add(generation)
    db.session.commit()
    return generation


def update_generation(generation_id, **fields):
    """Apply ``fields`` (code, css, status, attempts, error_message) and commit."""
    generation = db.session.get(Generation, generation_id)
    if not generation:
        return None
    for key, value in fields.items():
        setattr(generation, key, value)
    db.session.commit()
    return generation


def get_generation(generation_id, include_assets=False):
    generation = db.session.get(Generation, generation_id)
    if generation and include_assets:
        _ = generation.assets  # load before the session closes
    return generation


def list_generations(limit=10):
    """Newest-first records paired with their asset counts."""
    asset_count = (
        db.session.query(Asset.generation_id, db.func.count(Asset.id).label("n"))
        .group_by(Asset.generation_id)
        .subquery()
    )
    rows = (
        db.session.query(Generation, db.func.coalesce(asset_count.c.n, 0))
        .outerjoin(asset_count, asset_count.c.generation_id == Generation.id)
        .order_by(Generation.created_at.desc())
        .limit(limit)
        .all()
    )
    return [(generation, count) for generation, count in rows]


def _storage_keys(generation):
    keys = [asset.path for asset in generation.assets]
    if generation.screenshot_key and generation.screenshot_key not in keys:
        keys.append(generation.screenshot_key)
    return keys


def delete_generation(generation_id):
    """Delete a record, its assets and its stored files.

    File cleanup is best-effort and never blocks the database delete.

    Returns:
        (deleted, files_deleted, files_failed); deleted is False when the
        record does not exist.
    """
    generation = db.session.get(Generation, generation_id)
    if not generation:
        return False, 0, 0

    files_deleted, files_failed = storage_service.delete_many(_storage_keys(generation))

    db.session.delete(generation)  # cascades to assets
    db.session.commit()
    logger.info(
        "Generation %s deleted (%d files, %d failed)",
        generation_id,
        files_deleted,
        files_failed,
    )
    return True, files_deleted, files_failed


def delete_all_generations():
    """Delete every record and asset.

    Assets go first inside the same transaction so a bulk delete can never
    leave orphans, whatever the database's foreign-key settings.

    Returns:
        (deleted, files_deleted, files_failed)
    """
    keys = []
    for generation in Generation.query.all():
        keys.extend(_storage_keys(generation))
    files_deleted, files_failed = storage_service.delete_many(keys)

    Asset.query.delete(synchronize_session=False)
    deleted = Generation.query.delete(synchronize_session=False)
    db.session.commit()
    logger.info(
        "Deleted %d generations, %d files (%d failed)", deleted, files_deleted, files_failed
    )
    return deleted, files_deleted, files_failed


def add_screenshot(generation, png_bytes):
    """Store a PNG screenshot and record it as an asset."""
    storage_key = f"screenshots/{generation.id}-{uuid.uuid4().hex[:8]}.png"
    storage_service.upload(storage_key, png_bytes, content_type="image/png")

    asset = Asset(generation_id=generation.id, kind="screenshot", path=storage_key)
    db.session.add(asset)
    generation.screenshot_key = storage_key
    generation.screenshot_url = storage_service.get_public_url(storage_key)
    db.session.commit()
    return asset


def get_stats():
    """Record counts by status."""
    rows = (
        db.session.query(Generation.status, db.func.count(Generation.id))
        .group_by(Generation.status)
        .all()
    )
    return dict(rows)
