"""Custom exception hierarchy for the n8n Workflow Assistant."""

from errors.exceptions import (
    ConfigurationError,
    DeployError,
    EmbeddingError,
    GenerationError,
    InvalidInputError,
    StoreLoadError,
    WorkflowAssistantError,
)

__all__ = [
    "ConfigurationError",
    "DeployError",
    "EmbeddingError",
    "GenerationError",
    "InvalidInputError",
    "StoreLoadError",
    "WorkflowAssistantError",
]
