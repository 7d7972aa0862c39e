from typing import Any, Dict, Sequence, Tuple
import json
import re
import yaml

FRONTMATTER = re.compile(r"\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)", re.DOTALL | re.MULTILINE)


def _quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def serialize_frontmatter(tags: Sequence[str], source: str) -> str:
    """Frontmatter block holding the tag list and the source locator"""

    quoted_tags = ", ".join(_quote(tag) for tag in tags)
    return f"---\ntags: [{quoted_tags}]\nsource: {_quote(source)}\n---\n"


def serialize_section(tags: Sequence[str], source: str, content: str) -> str:
    """Full section file: frontmatter, a blank line, then the content"""
    return f"{serialize_frontmatter(tags, source)}\n{content}"


def parse_frontmatter(text: str) -> Tuple[Dict[str, Any], str]:
    """Split a markdown file into its frontmatter mapping and body"""

    match = FRONTMATTER.match(text)
    if not match:
        return {}, text

    data = yaml.safe_load(match.group(1)) or {}
    if not isinstance(data, dict):
        data = {}

    return data, text[match.end():]
