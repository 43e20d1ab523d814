"""Marketing context fallbacks shared by all agents."""

from typing import Any

from content_pipeline.models import MarketingContext

DEFAULT_MARKETING_VALUES: dict[str, Any] = {
    "brand_voice": ["Professional", "Clear", "Helpful"],
    "brand_tone": "Professional",
    "target_audience": "Business professionals",
    "content_donts": ["Jargon", "Passive voice", "Unsubstantiated claims"],
}


def resolve_brand_voice(context: MarketingContext | None) -> list[str]:
    """Return the brand voice traits, or the default traits when absent."""
    if context is not None and context.brand_voice:
        return list(context.brand_voice)
    return list(DEFAULT_MARKETING_VALUES["brand_voice"])


def resolve_brand_tone(context: MarketingContext | None) -> str:
    """Return the brand tone, or the default tone when absent."""
    if context is not None and context.brand_tone:
        return context.brand_tone
    return str(DEFAULT_MARKETING_VALUES["brand_tone"])


def resolve_content_donts(context: MarketingContext | None) -> list[str]:
    """Return the content don'ts, or the default list when absent."""
    if context is not None and context.content_donts:
        return list(context.content_donts)
    return list(DEFAULT_MARKETING_VALUES["content_donts"])


def create_marketing_context(brand_name: str, **overrides: Any) -> MarketingContext:
    """Create a marketing context with defaults filled in for the voice and audience fields.

    Args:
        brand_name: Name of the brand.
        **overrides: Any other ``MarketingContext`` field.

    Raises:
        pydantic.ValidationError: If an override is not a valid field.
    """
    payload: dict[str, Any] = {"brand_name": brand_name, **overrides}
    for key, default in DEFAULT_MARKETING_VALUES.items():
        if not payload.get(key):
            payload[key] = list(default) if isinstance(default, list) else default
    if not payload.get("value_proposition"):
        payload["value_proposition"] = f"{brand_name} helps businesses succeed"
    return MarketingContext.model_validate(payload)
