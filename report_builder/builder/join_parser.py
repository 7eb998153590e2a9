"""Table-name discovery in free-text JOIN fragments."""

import re
from typing import List

TABLE_NAME_PATTERN = re.compile(r"(?:JOIN|FROM)\s+([a-zA-Z_][a-zA-Z0-9_]*)", re.IGNORECASE)


def extract_table_names(join_query: str) -> List[str]:
    """Names following ``JOIN``/``FROM`` keywords, first-seen order, without duplicates."""
    if not join_query or not join_query.strip():
        return []

    names: List[str] = []
    for match in TABLE_NAME_PATTERN.finditer(join_query):
        if match.group(1) not in names:
            names.append(match.group(1))
    return names
