"""Prompt construction for document stages.

A prompt combines three parts: the repository context (either the full
payload or a reference to cached content), the document structure the
model must follow, and a response-language directive.
"""

from onboarder.renderers.filters import escape_xml
from onboarder.templates.renderer import render_template

FULL_LANGUAGE_INSTRUCTION = "- IMPORTANT: Response MUST be in {language} language"
CACHED_LANGUAGE_INSTRUCTION = "- Response MUST be in language: {language}"


def language_instruction(target_language: str | None, cached: bool) -> str:
    """Return the response-language directive, empty for a blank language."""
    if not target_language or not target_language.strip():
        return ""
    template = CACHED_LANGUAGE_INSTRUCTION if cached else FULL_LANGUAGE_INSTRUCTION
    return template.format(language=target_language.strip())


def cache_reference(cache_name: str) -> str:
    """Context block pointing the model at cached content."""
    return (
        f'<cached_repository_context name="{escape_xml(cache_name)}">\n'
        "Repository context is available in cached content.\n"
        "</cached_repository_context>"
    )


def build_prompt(
    prompt_template: str,
    documentation: str,
    target_language: str | None,
    payload: str | None = None,
    cache_name: str | None = None,
) -> str:
    """Render a stage prompt.

    The cache reference is used when ``cache_name`` is given, otherwise the
    full payload is embedded.

    Raises:
        ValueError: If neither a payload nor a cache name is available, or
            the template cannot be rendered
    """
    cached = cache_name is not None
    if cached:
        repository_context = cache_reference(cache_name)
    elif payload is not None:
        repository_context = payload
    else:
        raise ValueError("Either a context payload or a cache name is required")

    return render_template(
        prompt_template,
        repository_context=repository_context,
        documentation_template=documentation,
        language_instruction=language_instruction(target_language, cached),
        cached=cached,
    )
