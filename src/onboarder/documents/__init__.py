"""Onboarding document generation: stage table, prompts and pipeline."""

from onboarder.documents.pipeline import (
    DocumentPipeline,
    PipelineContext,
    aggregate_documents,
)
from onboarder.documents.prompts import build_prompt, cache_reference, language_instruction
from onboarder.documents.stages import (
    DOCUMENT_STAGES,
    VALIDATION_STAGE,
    StageDefinition,
    append_project_structure,
)

__all__ = [
    "DOCUMENT_STAGES",
    "DocumentPipeline",
    "PipelineContext",
    "StageDefinition",
    "VALIDATION_STAGE",
    "aggregate_documents",
    "append_project_structure",
    "build_prompt",
    "cache_reference",
    "language_instruction",
]
