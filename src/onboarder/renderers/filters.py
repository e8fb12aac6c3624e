"""Jinja2 filters shared by the context payload, prompts and reports.

Free text that ends up inside the XML-like repository context is escaped by
``escape_xml``. The same function is registered as the ``xml`` filter so a
value echoed by a prompt template is escaped exactly as it is in the payload.
"""

from datetime import UTC, datetime
from xml.sax.saxutils import escape

_XML_ENTITIES = {"'": "&apos;", '"': "&quot;"}


def escape_xml(value: object) -> str:
    """Escape ``& < > ' "`` for XML text and attribute values.

    Examples:
        >>> escape_xml("fix <b> & 'quote'")
        'fix &lt;b&gt; &amp; &apos;quote&apos;'
    """
    if value is None:
        return ""
    return escape(str(value), _XML_ENTITIES)


def iso_utc(value: datetime | None) -> str:
    """Format a datetime as ISO-8601 UTC with a ``Z`` suffix, second precision."""
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def format_datetime(value: datetime | None, fmt: str = "%Y-%m-%d %H:%M UTC") -> str:
    """Human-readable UTC timestamp for markdown reports."""
    if value is None:
        return "N/A"
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime(fmt)


def md_cell(value: object) -> str:
    """Make a value safe for a markdown table cell."""
    if value is None:
        return ""
    return str(value).replace("|", "\\|").replace("\n", " ").strip()
