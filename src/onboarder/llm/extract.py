"""Response cleanup: strip scratch blocks and code fences from model output."""

from onboarder.errors import ErrorKind, OnboarderError

ANALYSIS_START = "<analysis>"
ANALYSIS_END = "</analysis>"
FENCE = "```"
FENCE_PREFIXES = ("```markdown", "```json", FENCE)


def clean_response(text: str | None) -> str:
    """Reduce a raw response to the document text.

    1. A leading ``<analysis>...</analysis>`` block is dropped through the
       end marker.
    2. One layer of ```` ```markdown ````, ```` ```json ```` or bare ```` ``` ````
       fencing is removed, keeping everything between the opening fence and
       the last closing fence.

    Text without a recognized wrapper is returned trimmed, so cleaning is
    idempotent.

    Examples:
        >>> clean_response("```markdown\\nHello\\n```")
        'Hello'
        >>> clean_response("<analysis>plan</analysis>\\nBody")
        'Body'
    """
    if not text:
        return ""

    result = text.strip()

    if result.startswith(ANALYSIS_START):
        end = result.find(ANALYSIS_END)
        if end != -1:
            result = result[end + len(ANALYSIS_END):].strip()

    for prefix in FENCE_PREFIXES:
        if result.startswith(prefix):
            closing = result.rfind(FENCE)
            if closing >= len(prefix):
                return result[len(prefix):closing].strip()

    return result


def extract_document(text: str | None, document_type: str = "document") -> str:
    """Clean a response and require usable content.

    Raises:
        OnboarderError: PARSE_FAILURE if nothing is left after cleanup
    """
    cleaned = clean_response(text)
    if not cleaned:
        raise OnboarderError(
            ErrorKind.PARSE_FAILURE,
            f"Response for {document_type} contained no content after cleanup",
        )
    return cleaned
