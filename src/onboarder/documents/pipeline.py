"""Document generation pipeline.

Runs the stage table in order with one generic stage runner:

1. Render the stage prompt against the cache reference, or the full
   payload when no cache is available
2. Call the model through the resilient client
3. Clean the response
4. Apply the stage's post-process hook
5. Record the document

Debug files (rendered prompts and generated output) are a best-effort side
channel: write failures are logged and never affect the result.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from onboarder.documents.prompts import build_prompt
from onboarder.documents.stages import DOCUMENT_STAGES, VALIDATION_STAGE, StageDefinition
from onboarder.llm.client import GenerationOptions
from onboarder.llm.extract import extract_document
from onboarder.llm.resilient import ResilientApiClient
from onboarder.models.documents import DocumentResult
from onboarder.models.report import RepositoryReport
from onboarder.templates.renderer import load_text, render_template

logger = logging.getLogger(__name__)

DocumentCallback = Callable[[str, str], None]


@dataclass(frozen=True)
class PipelineContext:
    """Inputs shared by every stage of one run.

    Attributes:
        report: Immutable repository report
        payload: Full repository context payload
        cache_name: Cached-content handle, or None to embed the payload
        target_language: Response language for every document
    """

    report: RepositoryReport
    payload: str
    cache_name: str | None = None
    target_language: str = "English"


def aggregate_documents(result: DocumentResult) -> str:
    """Concatenate generated documents for validation, each under a header line."""
    parts = []
    for document_type, content in result.items():
        parts.append(f"--- Document: {document_type} ---\n{content}\n\n")
    return "".join(parts)


class DocumentPipeline:
    """Generate the onboarding documents for one repository.

    Usage:
        pipeline = DocumentPipeline(api, debug_dir=Path(".onboarder/debug"))
        result = pipeline.run(PipelineContext(report, payload, cache_name))
    """

    def __init__(
        self,
        api: ResilientApiClient,
        stages: Sequence[StageDefinition] = DOCUMENT_STAGES,
        debug_dir: Path | None = None,
        max_tokens: int | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            api: Retrying generation client
            stages: Ordered stage table
            debug_dir: Directory for debug files (None disables them)
            max_tokens: Response token limit passed with every call
        """
        self.api = api
        self.stages = tuple(stages)
        self.debug_dir = debug_dir
        self.max_tokens = max_tokens

    def run(
        self,
        context: PipelineContext,
        validate: bool = False,
        on_document: DocumentCallback | None = None,
    ) -> DocumentResult:
        """Run every stage in order.

        Args:
            context: Shared stage inputs
            validate: Also generate the validation report over all documents
            on_document: Called with (document_type, content) as soon as a
                document is recorded, so completed work survives a later
                fatal error

        Returns:
            DocumentResult in stage order

        Raises:
            OnboarderError: The first fatal stage failure
        """
        result = DocumentResult()
        total = len(self.stages)
        mode = "cached context" if context.cache_name else "full payload"
        logger.info("Generating %d documents using %s", total, mode)

        for index, stage in enumerate(self.stages, start=1):
            logger.info("Stage %d/%d: Generating %s", index, total, stage.document_type)
            documentation = load_text(stage.documentation_template)
            content = self.run_stage(stage, documentation, context)
            self._record(result, stage.document_type, content, on_document)

        if validate:
            self.validate(result, context, on_document)

        logger.info("Generated %d documents", len(result))
        return result

    def validate(
        self,
        result: DocumentResult,
        context: PipelineContext,
        on_document: DocumentCallback | None = None,
    ) -> str | None:
        """Ask the model to review all generated documents against the repository.

        The report is added to ``result`` under ``Validation Report``.

        Returns:
            The report, or None when there was nothing to validate
        """
        generated = aggregate_documents(result)
        if not generated.strip():
            logger.warning("No generated documents to validate, skipping validation")
            return None

        logger.info("Validating %d generated documents", len(result))
        instructions = render_template(
            VALIDATION_STAGE.documentation_template,
            generated_documentation=generated,
        )
        content = self.run_stage(VALIDATION_STAGE, instructions, context)
        self._record(result, VALIDATION_STAGE.document_type, content, on_document)
        return content

    def run_stage(
        self,
        stage: StageDefinition,
        documentation: str,
        context: PipelineContext,
    ) -> str:
        """Generate one document and return its final text."""
        prompt = build_prompt(
            stage.prompt_template,
            documentation,
            context.target_language,
            payload=context.payload,
            cache_name=context.cache_name,
        )
        self._write_debug(stage.prompt_debug_name, prompt)

        options = GenerationOptions(
            cached_content=context.cache_name,
            max_tokens=self.max_tokens,
        )
        raw = self.api.call(prompt, options)
        content = extract_document(raw, stage.document_type)

        if stage.post_process is not None:
            content = stage.post_process(content, context.report)

        self._write_debug(stage.debug_name, content)
        return content

    def _record(
        self,
        result: DocumentResult,
        document_type: str,
        content: str,
        on_document: DocumentCallback | None,
    ) -> None:
        result.add_document(document_type, content)
        logger.info("Generated %s (%d chars)", document_type, len(content))
        if on_document is not None:
            on_document(document_type, content)

    def _write_debug(self, name: str, content: str) -> None:
        if self.debug_dir is None:
            return
        path = self.debug_dir / name
        try:
            self.debug_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            logger.warning("Could not write debug file %s: %s", path, e)
        else:
            logger.debug("Wrote debug file %s", path)
