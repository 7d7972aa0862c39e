from typing import List, Sequence


def normalize_path(path: str) -> str:
    """Ensure a path has exactly one leading slash and no trailing slash"""
    return "/" + path.strip().strip("/")


def has_dot_segment(path: str) -> bool:
    """True when any segment starts or ends with a dot (hidden, ./, ../)"""
    return any(
        segment.startswith(".") or segment.endswith(".")
        for segment in path.split("/")
        if segment
    )


def is_valid_section_filepath(path: str) -> bool:
    return path.endswith(".md") and not has_dot_segment(path)


def common_path_prefix(filepaths: Sequence[str]) -> str:
    """Longest shared leading directory of normalized filepaths.

    Only directory segments take part, so a single planned file yields its
    parent directory rather than itself. Returns "" when the paths only
    share the root.
    """

    if not filepaths:
        return ""

    prefix: List[str] = normalize_path(filepaths[0]).split("/")[:-1]
    for filepath in filepaths[1:]:
        if len(prefix) <= 1:
            break
        parts = normalize_path(filepath).split("/")[:-1]
        for index, segment in enumerate(prefix):
            if index >= len(parts) or parts[index] != segment:
                del prefix[index:]
                break

    return "/".join(prefix)


def strip_prefix(filepath: str, prefix: str) -> str:
    """Path of a planned file relative to the common prefix"""

    if prefix and filepath.startswith(prefix + "/"):
        return filepath[len(prefix):]
    return filepath
