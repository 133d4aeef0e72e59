"""Generation orchestrator: prompt → streamed code → validation → record.

Per request the record moves ``pending → completed | failed`` exactly once.
Attempts are strictly sequential; at most one API call is in flight.
"""
import logging
import time
from dataclasses import dataclass, field
from typing import Optional
from flask import current_app
from app.extensions import db
from app.models.generation import Generation
from app.services import (
    generation_service,
    image_service,
    prompt_service,
    stylesheet_service,
    v0_service,
)
from app.services.design_tokens import load_tokens
from app.services.validation_service import validate_generated_code

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 2  # initial call + one retry


class ConfigurationError(RuntimeError):
    pass


@dataclass
class GenerationRequest:
    prompt: str
    style: str = "default"
    template: str = "general"
    reference_image: Optional[str] = None  # data URL


@dataclass
class GenerationOutcome:
    generation_id: str
    status: str
    attempts: int
    template: str
    code: str = ""
    css: str = ""
    error: Optional[str] = None
    details: Optional[str] = None
    http_status: int = 200
    metrics: dict = field(default_factory=dict)

    def to_response(self):
        if self.status == "completed":
            return {
                "id": self.generation_id,
                "code": self.code,
                "css": self.css,
                "status": self.status,
                "attempts": self.attempts,
                "template": self.template,
                "metrics": self.metrics,
            }
        body = {"error": self.error, "id": self.generation_id, "attempts": self.attempts}
        if self.details:
            body["details"] = self.details
        return body


def build_request(data, upload=None):
    """Validate raw input into a GenerationRequest.

    ``upload`` is an optional (bytes, content_type) pair from a multipart
    form; otherwise ``data["referenceImage"]`` may carry a data URL.

    Raises:
        ValueError on invalid input (nothing has been created yet)
    """
    prompt = data.get("prompt")
    if not isinstance(prompt, str) or not prompt.strip():
        raise ValueError("A non-empty prompt is required.")

    style = data.get("style") or "default"
    if style not in Generation.STYLES:
        raise ValueError(f"Unknown style: {style}")

    template = data.get("template") or prompt_service.detect_template_type(prompt)
    if template not in Generation.TEMPLATES:
        raise ValueError(f"Unknown template: {template}")

    max_bytes = current_app.config["MAX_REFERENCE_IMAGE_BYTES"]
    reference_image = None
    if upload is not None:
        image_bytes, content_type = upload
        reference_image = image_service.reference_image_from_upload(
            image_bytes, content_type, max_bytes
        )
    elif data.get("referenceImage"):
        reference_image = image_service.validate_reference_image(
            data["referenceImage"], max_bytes
        )

    return GenerationRequest(
        prompt=prompt, style=style, template=template, reference_image=reference_image
    )


def ensure_configured():
    api_key = current_app.config.get("V0_API_KEY")
    if not api_key or api_key == "your_v0_api_key_here":
        logger.error("V0_API_KEY not configured")
        raise ConfigurationError("V0_API_KEY is not configured.")


def generate(request):
    """Create a pending record for ``request`` and run the retry loop."""
    ensure_configured()
    generation = generation_service.create_generation(
        request.prompt, style=request.style, template=request.template
    )
    logger.info(
        "Generation %s created (template=%s, image=%s)",
        generation.id,
        request.template,
        bool(request.reference_image),
    )
    return run_generation(generation, request)


def run_generation(generation, request):
    """Drive an existing pending record to its terminal state.

    Unexpected exceptions mark the record failed before propagating, so no
    record is left pending.
    """
    try:
        return _run(generation, request)
    except Exception as e:
        logger.exception("Generation %s crashed", generation.id)
        db.session.rollback()
        if generation.status == "pending":
            generation_service.update_generation(
                generation.id, status="failed", error_message=str(e)[:500]
            )
        raise


def _run(generation, request):
    started = time.monotonic()
    tokens = load_tokens()
    with_image = bool(request.reference_image)
    system_prompt = prompt_service.build_system_prompt(
        tokens, style=request.style, with_image=with_image
    )

    attempts = 0
    retry_reason = None
    final_code = None

    while attempts < MAX_ATTEMPTS:
        attempts += 1
        logger.info(
            "Generation %s attempt %d/%d", generation.id, attempts, MAX_ATTEMPTS
        )
        user_prompt = prompt_service.build_user_prompt(
            request.prompt,
            template=request.template,
            retry_reason=retry_reason,
            with_image=with_image,
        )

        try:
            code = v0_service.generate_code(
                system_prompt, user_prompt, request.reference_image
            )
        except v0_service.GenerationAPIError as e:
            logger.error(
                "Generation %s API call failed (%s): %s", generation.id, e.kind, e
            )
            generation_service.update_generation(
                generation.id, status="failed", attempts=attempts, error_message=str(e)
            )
            return GenerationOutcome(
                generation_id=generation.id,
                status="failed",
                attempts=attempts,
                template=request.template,
                error=str(e),
                details=e.kind,
                http_status=500,
            )

        validation = validate_generated_code(code)
        if validation.valid:
            logger.info("Generation %s passed validation", generation.id)
            final_code = code
            break

        logger.warning(
            "Generation %s failed validation: %s (attempt %d)",
            generation.id,
            validation.reason,
            attempts,
        )
        retry_reason = validation.reason

        if attempts >= MAX_ATTEMPTS:
            message = (
                f"Code validation failed: {validation.reason}. "
                "Maximum retry attempts exceeded."
            )
            # Keep the rejected code for debugging
            generation_service.update_generation(
                generation.id,
                status="failed",
                code=code,
                attempts=attempts,
                error_message=message,
            )
            return GenerationOutcome(
                generation_id=generation.id,
                status="failed",
                attempts=attempts,
                template=request.template,
                code=code,
                error=message,
                details=validation.reason,
                http_status=422,
            )

    css = _generate_css(generation.id, final_code, tokens)
    generation_service.update_generation(
        generation.id,
        status="completed",
        code=final_code,
        css=css or None,
        attempts=attempts,
    )

    duration_ms = (time.monotonic() - started) * 1000
    logger.info(
        "Generation %s completed in %.0fms (attempts=%d, code=%d chars, css=%d chars)",
        generation.id,
        duration_ms,
        attempts,
        len(final_code),
        len(css),
    )
    return GenerationOutcome(
        generation_id=generation.id,
        status="completed",
        attempts=attempts,
        template=request.template,
        code=final_code,
        css=css,
        metrics={
            "totalDuration": round(duration_ms),
            "codeLength": len(final_code),
            "cssLength": len(css),
        },
    )


def _generate_css(generation_id, code, tokens):
    """Best-effort stylesheet; failures never block completion."""
    try:
        css = stylesheet_service.generate_css(code, tokens)
    except Exception:
        logger.exception(
            "CSS generation failed for %s, continuing without CSS", generation_id
        )
        return ""
    logger.info(
        "CSS generated for %s (%.2f KB)",
        generation_id,
        stylesheet_service.calculate_css_size(css),
    )
    return css
