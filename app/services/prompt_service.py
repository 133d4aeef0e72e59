"""Prompt construction for the component generator."""
from app.services.design_tokens import core_colors

TEMPLATE_HINTS = {
    "landing": "Create full-page hero with CTA, features, testimonials.",
    "form": "Style inputs with bg-input, border-border, rounded-md. Include validation.",
    "card": "Use bg-muted, border, rounded-lg, shadow-md. Add hover effects.",
    "general": "Modern, responsive UI with design tokens.",
}

STYLE_PRESETS = {
    "default": "Dark theme with modern, minimalist aesthetics",
    "light": "Light theme with clean, bright aesthetics",
    "modern": "Modern theme with bold colors and strong contrasts",
}

TEMPLATE_KEYWORDS = (
    ("landing", ("landing", "hero", "홈페이지", "메인 페이지", "랜딩")),
    (
        "form",
        ("form", "login", "signup", "register", "input", "폼", "로그인", "회원가입", "입력"),
    ),
    ("card", ("card", "profile", "product", "카드", "프로필", "상품")),
)

VISION_ADDENDUM = """

VISION MODE - IMAGE REFERENCE:
The user has provided a reference image. Your task:
1. Carefully analyze the image's design, layout, colors, UI patterns, and visual hierarchy
2. Create a similar component using React and Tailwind CSS
3. Match the visual style, spacing, typography, and structure as closely as possible
4. Follow all the rules above (no imports, whitelisted Tailwind classes only, etc.)
5. If the image shows a specific UI pattern (card, form, navigation, etc.), replicate that pattern

IMPORTANT: Focus on visual similarity while maintaining code quality and accessibility."""


def build_system_prompt(tokens, style="default", with_image=False):
    colors = " ".join(f'{name}="{value}"' for name, value in core_colors(tokens))
    radius = ", ".join(tokens["radius"].keys())
    spacing = ", ".join(list(tokens["spacing"].keys())[:6])

    prompt = f"""You are a React component generator. Create modern, beautiful UI components.

RULES:
1. Output format: "export default function ComponentName() {{...}}"
2. Use plain JavaScript (NO TypeScript types like : Type)
3. NO import statements - hooks already available: useState, useEffect, useRef, useCallback, useMemo
4. NO external images/URLs - use Tailwind bg-* or placeholder colors
5. NO fetch/axios/network requests
6. Use semantic HTML + ARIA for accessibility

DESIGN TOKENS:
Colors: {colors}
Radius: {radius}
Spacing: {spacing}

STYLE: {style_preset_context(style)}

TAILWIND CLASSES:
- Colors: bg-{{color}}, text-{{color}}, border-{{color}}
- Layout: flex, grid, relative, absolute
- Spacing: p-*, m-*, gap-*, space-*
- Sizing: w-full, h-screen, max-w-*
- Effects: hover:*, transition-*, opacity-*, scale-*
- Standard utilities available

OUTPUT:
Return ONLY the code. NO markdown, NO explanations, NO ``` blocks."""

    if with_image:
        prompt += VISION_ADDENDUM
    return prompt


def build_user_prompt(prompt, template="general", retry_reason=None, with_image=False):
    """User message for one attempt.

    ``retry_reason`` is the previous validation failure; it is appended as a
    directive so the model can correct itself.
    """
    user_prompt = f"""TEMPLATE: {template.upper()}
HINT: {TEMPLATE_HINTS[template]}

USER REQUEST:
{prompt}

REQUIREMENTS:
- Use design tokens colors (bg, fg, primary, muted, etc.)
- Responsive + accessible
- Smooth transitions
- NO external resources"""

    if retry_reason:
        user_prompt += f"\n\nFIX REQUIRED: {retry_reason}"

    if with_image and not retry_reason:
        user_prompt = (
            "[Reference image request]\n\n"
            f"{user_prompt}\n\n"
            "Match the design of the attached image as closely as possible."
        )
    return user_prompt


def detect_template_type(prompt):
    lowered = prompt.lower()
    for template, keywords in TEMPLATE_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return template
    return "general"


def style_preset_context(style):
    return STYLE_PRESETS.get(style, STYLE_PRESETS["default"])
