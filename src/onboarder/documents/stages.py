"""Document stage table.

Every generated document is described by one StageDefinition row; the
pipeline iterates the rows in order with a single generic runner. Adding a
document means adding a row, two templates and, optionally, a post-process
function.
"""

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import PurePosixPath

from onboarder.context.tree import render_directory_tree
from onboarder.models.report import RepositoryReport

# Post-processing hooks are pure: they never call the model again
PostProcessor = Callable[[str, RepositoryReport], str]


@dataclass(frozen=True)
class StageDefinition:
    """One generation stage.

    Attributes:
        document_type: Key under which the document is recorded
        prompt_template: Packaged prompt template (Jinja2)
        documentation_template: Packaged document structure the model follows
        debug_name: File name of the generated-output debug file
        post_process: Optional pure transformation of the cleaned output
    """

    document_type: str
    prompt_template: str
    documentation_template: str
    debug_name: str
    post_process: PostProcessor | None = None

    @property
    def prompt_debug_name(self) -> str:
        """Debug file name for the rendered prompt, e.g. ``readme_prompt_debug.txt``."""
        stem = PurePosixPath(self.prompt_template).name.split(".")[0]
        return f"{stem}_prompt_debug.txt"


def append_project_structure(document: str, report: RepositoryReport) -> str:
    """Append a ``## Project Structure`` section with the full file tree."""
    tree = render_directory_tree(report.files)
    separator = "" if document.endswith("\n") else "\n"
    return f"{document}{separator}\n## Project Structure\n\n```\n{tree}```\n"


DOCUMENT_STAGES: tuple[StageDefinition, ...] = (
    StageDefinition(
        document_type="AI Context",
        prompt_template="prompts/ai_context.md.j2",
        documentation_template="docs/ai_context.md",
        debug_name="generated_context_file_debug.md",
        post_process=append_project_structure,
    ),
    StageDefinition(
        document_type="README.md",
        prompt_template="prompts/readme.md.j2",
        documentation_template="docs/readme.md",
        debug_name="generated_readme_file_debug.md",
    ),
    StageDefinition(
        document_type="Refactorings",
        prompt_template="prompts/refactorings.md.j2",
        documentation_template="docs/refactorings.md",
        debug_name="generated_refactorings_debug.md",
    ),
    StageDefinition(
        document_type="DDD Refactoring",
        prompt_template="prompts/ddd_refactoring.md.j2",
        documentation_template="docs/ddd_refactoring.md",
        debug_name="generated_ddd_refactoring_debug.md",
    ),
    StageDefinition(
        document_type="Quality Assessment",
        prompt_template="prompts/quality_assessment.md.j2",
        documentation_template="docs/quality_assessment.md",
        debug_name="generated_quality_assessment_debug.md",
    ),
    StageDefinition(
        document_type="Dictionary",
        prompt_template="prompts/dictionary.md.j2",
        documentation_template="docs/dictionary.md",
        debug_name="generated_dictionary_debug.md",
    ),
)

VALIDATION_STAGE = StageDefinition(
    document_type="Validation Report",
    prompt_template="prompts/validation.md.j2",
    documentation_template="docs/validation.md.j2",
    debug_name="generated_validation_report_debug.md",
)
