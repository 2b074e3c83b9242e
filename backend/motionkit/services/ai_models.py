"""Chat models available through OpenRouter and their token pricing."""

from dataclasses import dataclass
from typing import Literal

from motionkit.config import get_settings


@dataclass(frozen=True)
class AIModel:
    id: str
    name: str
    provider: str
    description: str
    context_window: int
    cost_tier: Literal["low", "medium", "high"]
    recommended: bool = False


AI_MODELS: dict[str, AIModel] = {
    model.id: model
    for model in (
        AIModel(
            "moonshotai/kimi-k2",
            "Kimi K2",
            "Moonshot AI",
            "Excellent for creative and complex tasks with 128K context",
            128_000,
            "medium",
            recommended=True,
        ),
        AIModel(
            "anthropic/claude-sonnet-4",
            "Claude Sonnet 4",
            "Anthropic",
            "Excellent reasoning and creative capabilities",
            200_000,
            "medium",
            recommended=True,
        ),
        AIModel("openai/gpt-4o", "GPT-4o", "OpenAI", "Fast and capable multimodal model", 128_000, "medium"),
        AIModel(
            "openai/gpt-4.1",
            "GPT-4.1",
            "OpenAI",
            "Latest GPT model with improved capabilities",
            128_000,
            "high",
        ),
        AIModel(
            "google/gemini-2.5-pro-preview",
            "Gemini 2.5 Pro",
            "Google",
            "Strong structured output and reasoning",
            1_000_000,
            "medium",
        ),
    )
}


def get_model(model_id: str | None = None) -> AIModel:
    """Look up a model, falling back to the configured default."""
    if model_id and model_id in AI_MODELS:
        return AI_MODELS[model_id]
    default_id = get_settings().default_model_id
    return AI_MODELS.get(default_id) or next(iter(AI_MODELS.values()))


# =============================================================================
# Pricing
# =============================================================================


@dataclass(frozen=True)
class ModelPricing:
    """USD per 1M tokens."""

    input: float
    output: float


MODEL_PRICING: dict[str, ModelPricing] = {
    "moonshotai/kimi-k2": ModelPricing(input=0.3, output=0.6),
    "anthropic/claude-sonnet-4": ModelPricing(input=3.0, output=15.0),
    "openai/gpt-4o": ModelPricing(input=2.5, output=10.0),
    "openai/gpt-4.1": ModelPricing(input=2.0, output=8.0),
    "google/gemini-2.5-pro-preview": ModelPricing(input=1.25, output=5.0),
}

DEFAULT_PRICING = ModelPricing(input=1.0, output=3.0)


def calculate_cost(model_id: str, prompt_tokens: int, completion_tokens: int) -> float:
    """Estimated cost in USD of one generation."""
    pricing = MODEL_PRICING.get(model_id, DEFAULT_PRICING)
    input_cost = (prompt_tokens / 1_000_000) * pricing.input
    output_cost = (completion_tokens / 1_000_000) * pricing.output
    return input_cost + output_cost
