from typing import List, Sequence
import re


# `@12` or `@12-40`; stray non-digits before each number are tolerated
LINE_SPECIFIER = re.compile(r"^@\D*(\d+)(?:-\D*(\d+))?")


def compose_content(content_specifiers: Sequence[str], source_lines: Sequence[str]) -> str:
    """Resolve content specifiers against bare source lines.

    ``@n`` pulls line n, ``@a-b`` pulls lines a through b (1-based,
    inclusive). Anything else is a literal line; a leading ``=`` is dropped
    so literals that start with ``@`` can be written as ``=@...``.
    """

    lines: List[str] = []

    for specifier in content_specifiers:
        match = LINE_SPECIFIER.match(specifier)
        if match:
            start = int(match.group(1)) - 1
            end = int(match.group(2)) if match.group(2) else start + 1
            lines.extend(source_lines[max(start, 0):end])
            continue

        lines.append(specifier[1:] if specifier.startswith("=") else specifier)

    return "\n".join(lines)
