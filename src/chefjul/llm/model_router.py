"""
Chef Jul - Model Router.

Picks the model and temperature for each kind of LLM call.

Complexity levels:
- low: classification, yes/no answers
- medium: conversation, single-recipe generation
- high: full week plans
"""

from typing import Literal, TypedDict


class ModelConfig(TypedDict, total=False):
    """Configuration for model calls."""

    model: str
    temperature: float


MODEL_CONFIGS: dict[str, ModelConfig] = {
    "low": {
        "model": "gpt-4.1-mini",
        "temperature": 0.0,
    },
    "medium": {
        "model": "gpt-4.1-mini",
        "temperature": 0.7,
    },
    "high": {
        "model": "gpt-4.1",
        "temperature": 0.7,
    },
}

DEFAULT_CONFIG: ModelConfig = {
    "model": "gpt-4.1-mini",
    "temperature": 0.5,
}

# Per-node temperature overrides
NODE_TEMPERATURE: dict[str, float] = {
    "intent": 0.0,  # Classification must be stable
    "recipe": 0.6,
    "meal_plan": 0.7,
    "chat": 0.7,
}


def get_model(complexity: Literal["low", "medium", "high"] | str) -> str:
    return MODEL_CONFIGS.get(complexity, DEFAULT_CONFIG)["model"]


def get_node_config(
    node: str,
    complexity: Literal["low", "medium", "high"] | str,
) -> ModelConfig:
    """
    Get model configuration for a node at a complexity level.

    Node temperature overrides win over the complexity default.
    """
    config = MODEL_CONFIGS.get(complexity, DEFAULT_CONFIG).copy()
    if node in NODE_TEMPERATURE:
        config["temperature"] = NODE_TEMPERATURE[node]
    return config
