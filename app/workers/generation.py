"""RQ worker job: run the generation loop for a pending record."""
import logging
from flask import current_app, has_app_context
from app import extensions
from app.extensions import db
from app.models.generation import Generation
from app.services import orchestrator

logger = logging.getLogger(__name__)

_worker_app = None


def _get_app():
    """Return an app instance for worker execution.

    Reuse the current app when already inside an app context (tests/CLI),
    otherwise lazily create the worker app once.
    """
    global _worker_app
    if has_app_context():
        return current_app._get_current_object()
    if _worker_app is None:
        from app import create_app

        _worker_app = create_app()
    return _worker_app


def generate_component(generation_id, payload):
    """Drive a pending generation to completed/failed.

    ``payload`` holds the validated request fields (prompt, style, template,
    reference_image). Enqueued by the API for async requests.

    Idempotency: records that already left ``pending`` are skipped.
    Distributed lock: prevents two workers running the same record.
    """
    app = _get_app()
    with app.app_context():
        generation = db.session.get(Generation, generation_id)
        if not generation:
            logger.error("Generation %s not found", generation_id)
            return None

        if generation.is_terminal:
            logger.info(
                "Generation %s already %s, skipping", generation_id, generation.status
            )
            return None

        lock = None
        if extensions.redis_client is not None:
            lock = extensions.redis_client.lock(
                f"generation:{generation_id}",
                timeout=app.config["GENERATION_JOB_TIMEOUT"],
            )
            if not lock.acquire(blocking=False):
                logger.info("Lock held for generation %s, skipping", generation_id)
                return None

        try:
            request = orchestrator.GenerationRequest(**payload)
            outcome = orchestrator.run_generation(generation, request)
            logger.info(
                "Generation %s finished as %s after %d attempt(s)",
                generation_id,
                outcome.status,
                outcome.attempts,
            )
            return outcome.status
        finally:
            if lock is not None:
                try:
                    lock.release()
                except Exception:
                    logger.debug("Lock for %s already expired", generation_id)
