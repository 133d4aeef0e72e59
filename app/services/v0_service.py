"""Streaming client for the v0 chat-completions API."""
import json
import logging
import re
import time
import httpx
from flask import current_app

logger = logging.getLogger(__name__)

DONE_SENTINEL = "[DONE]"
DATA_PREFIX = "data: "

_FENCE_OPEN_RE = re.compile(r"^```(?:tsx|typescript|ts|jsx|javascript|js)?\n?")
_FENCE_CLOSE_RE = re.compile(r"\n?```$")


class GenerationAPIError(RuntimeError):
    """The generation API call failed; never retried.

    ``kind`` is one of ``client`` (4xx), ``server`` (5xx), ``network`` or
    ``empty`` (stream finished without any text).
    """

    def __init__(self, message, kind, status_code=None):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


def _get_client():
    return httpx.Client(timeout=current_app.config["V0_TIMEOUT"])


def build_messages(system_prompt, user_prompt, reference_image=None):
    """Chat messages; a reference image switches the user turn to vision form."""
    user_content = user_prompt
    if reference_image:
        user_content = [
            {"type": "text", "text": user_prompt},
            {"type": "image_url", "image_url": {"url": reference_image}},
        ]
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_content},
    ]


def iter_deltas(lines):
    """Yield text deltas from server-sent event lines.

    Lines without the ``data: `` framing, undecodable payloads and events
    that are not chat-completion chunks are skipped; the ``[DONE]`` sentinel
    ends the stream.
    """
    for line in lines:
        line = line.strip()
        if not line.startswith(DATA_PREFIX):
            continue
        data = line[len(DATA_PREFIX):]
        if data == DONE_SENTINEL:
            return
        try:
            parsed = json.loads(data)
        except ValueError:
            continue
        if not isinstance(parsed, dict):
            continue
        choices = parsed.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            continue
        delta = choices[0].get("delta")
        content = delta.get("content") if isinstance(delta, dict) else None
        if isinstance(content, str) and content:
            yield content


def strip_code_fence(text):
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_OPEN_RE.sub("", cleaned, count=1)
        cleaned = _FENCE_CLOSE_RE.sub("", cleaned, count=1)
        cleaned = cleaned.strip()
    return cleaned


def _status_error(response):
    status = response.status_code
    reason = response.reason_phrase
    if 400 <= status < 500:
        return GenerationAPIError(
            f"Client error ({status}): check the request. {reason}",
            kind="client",
            status_code=status,
        )
    return GenerationAPIError(
        f"Server error ({status}): the v0 API is temporarily unavailable. {reason}",
        kind="server",
        status_code=status,
    )


def generate_code(system_prompt, user_prompt, reference_image=None):
    """Call the API with streaming enabled and return the cleaned code text.

    Raises:
        GenerationAPIError on non-2xx responses, transport failures or an
        empty stream.
    """
    config = current_app.config
    payload = {
        "model": config["V0_VISION_MODEL"] if reference_image else config["V0_MODEL"],
        "messages": build_messages(system_prompt, user_prompt, reference_image),
        "temperature": config["V0_TEMPERATURE"],
        "stream": True,
        "max_tokens": config["V0_MAX_TOKENS"],
    }
    headers = {
        "Authorization": f"Bearer {config['V0_API_KEY']}",
        "Content-Type": "application/json",
    }

    started = time.monotonic()
    chunks = []
    try:
        with _get_client() as client:
            with client.stream(
                "POST", config["V0_API_URL"], json=payload, headers=headers
            ) as response:
                if response.status_code >= 400:
                    body = response.read().decode("utf-8", "replace")
                    logger.error("v0 API error %s: %s", response.status_code, body[:500])
                    raise _status_error(response)
                for delta in iter_deltas(response.iter_lines()):
                    chunks.append(delta)
    except httpx.HTTPError as e:
        logger.error("v0 API call failed: %s", e)
        raise GenerationAPIError(
            "Network error: the v0 API call failed.", kind="network"
        ) from e

    code = "".join(chunks)
    logger.info(
        "v0 stream complete: %d deltas, %d chars in %.0fms",
        len(chunks),
        len(code),
        (time.monotonic() - started) * 1000,
    )
    if not code:
        raise GenerationAPIError("The v0 API did not generate any code.", kind="empty")
    return strip_code_fence(code)
