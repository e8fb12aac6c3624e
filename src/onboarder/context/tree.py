"""Directory tree rendering."""

from collections.abc import Iterable

INDENT = "  "


def _insert(tree: dict[str, dict], path: str) -> None:
    node = tree
    for part in path.strip("/").split("/"):
        if part:
            node = node.setdefault(part, {})


def render_directory_tree(paths: Iterable[str]) -> str:
    """Render file paths as an indented tree.

    Entries are sorted by name at every level, indented two spaces per depth
    (top-level entries already at depth 1) and directories end with ``/``.
    Every line, including the last, ends with a newline.

    Examples:
        >>> print(render_directory_tree(["src/app.py", "README.md"]), end="")
          README.md
          src/
            app.py
    """
    tree: dict[str, dict] = {}
    for path in paths:
        _insert(tree, path)

    lines: list[str] = []

    def walk(node: dict[str, dict], depth: int) -> None:
        for name in sorted(node):
            children = node[name]
            suffix = "/" if children else ""
            lines.append(f"{INDENT * depth}{name}{suffix}")
            walk(children, depth + 1)

    walk(tree, 1)
    return "".join(f"{line}\n" for line in lines)
