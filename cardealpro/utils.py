"""Shared utilities used across the sales assistant."""

from typing import Optional


def humanize_document_id(document_id: str) -> str:
    """Turn a kebab-case document ID into a display title.

    Examples:
        >>> humanize_document_id("deal-check-list")
        'Deal Check List'
        >>> humanize_document_id("payoff-authorization")
        'Payoff Authorization'
    """
    return " ".join(word.capitalize() for word in document_id.split("-") if word)


def truncate_snippet(text: str, length: int) -> str:
    """Cut text to ``length`` characters and mark the cut with an ellipsis.

    Examples:
        >>> truncate_snippet("Yes, reliability matters a lot", 20)
        'Yes, reliability mat...'
    """
    return text[:length] + "..."


def contains_any(text: str, keywords: list[str]) -> bool:
    """Case-insensitive substring test against a keyword vocabulary."""
    lower = text.lower()
    return any(keyword in lower for keyword in keywords)


def first_match(text: str, keywords: list[str]) -> Optional[str]:
    """Return the first keyword (in vocabulary order) found in text, if any."""
    lower = text.lower()
    for keyword in keywords:
        if keyword in lower:
            return keyword
    return None

