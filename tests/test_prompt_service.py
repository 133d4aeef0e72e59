"""Tests for prompt construction."""
from app.services import prompt_service
from app.services.design_tokens import load_tokens


def test_system_prompt_lists_core_tokens(app):
    tokens = load_tokens()
    prompt = prompt_service.build_system_prompt(tokens)

    for name in ("bg", "fg", "primary", "secondary", "muted", "accent", "destructive", "border"):
        assert f'{name}="{tokens["colors"][name]}"' in prompt
    assert "Radius: sm, md, lg, xl, 2xl" in prompt
    assert "VISION MODE" not in prompt


def test_system_prompt_vision_addendum(app):
    prompt = prompt_service.build_system_prompt(load_tokens(), style="light", with_image=True)
    assert "VISION MODE" in prompt
    assert prompt_service.STYLE_PRESETS["light"] in prompt


def test_user_prompt_retry_directive():
    prompt = prompt_service.build_user_prompt(
        "Make a card", template="card", retry_reason="Script tags are not allowed"
    )
    assert prompt.startswith("TEMPLATE: CARD")
    assert prompt.endswith("FIX REQUIRED: Script tags are not allowed")


def test_user_prompt_image_hint_only_on_first_attempt():
    first = prompt_service.build_user_prompt("Copy this", with_image=True)
    retry = prompt_service.build_user_prompt("Copy this", with_image=True, retry_reason="x")
    assert first.startswith("[Reference image request]")
    assert not retry.startswith("[Reference image request]")


def test_detect_template_type():
    assert prompt_service.detect_template_type("A landing page for a SaaS") == "landing"
    assert prompt_service.detect_template_type("Login form") == "form"
    assert prompt_service.detect_template_type("User profile") == "card"
    assert prompt_service.detect_template_type("Simple button") == "general"
