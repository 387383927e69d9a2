"""RFP Responder package."""

from .config import (
    AIProviderSettings,
    AssemblyConfig,
    ChunkingConfig,
    DetectionConfig,
    OrchestrationConfig,
    RetrievalConfig,
)

__all__ = [
    "AIProviderSettings",
    "AssemblyConfig",
    "ChunkingConfig",
    "DetectionConfig",
    "OrchestrationConfig",
    "RetrievalConfig",
]
