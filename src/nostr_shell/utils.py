"""Small shared helpers."""


def deduplicate_preserving_order(items: list[str]) -> list[str]:
    """Remove duplicates, keeping the first occurrence of each item."""
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def single_line(text: str) -> str:
    """Collapse multi-line text into one line."""
    return "; ".join(line.strip() for line in text.splitlines() if line.strip())
