"""Description similarity scoring."""


def string_similarity(first: str | None, second: str | None) -> float:
    """Score how alike two descriptions are, from 0.0 to 1.0.

    Both strings are lowercased and stripped first. Two empty strings score
    1.0. When one contains the other the score is 0.8, which includes
    identical non-empty strings. Otherwise the score is the word-overlap ratio
    ``2 * |common words| / (|words a| + |words b|)``, where common words are
    counted from the first string's words that also appear in the second.

    Args:
        first: First description (None counts as empty).
        second: Second description (None counts as empty).

    Returns:
        Similarity score.
    """
    a = (first or "").strip().lower()
    b = (second or "").strip().lower()

    if not a and not b:
        return 1.0

    longer, shorter = (a, b) if len(a) > len(b) else (b, a)
    if shorter in longer:
        return 0.8

    words_a = a.split()
    words_b = b.split()
    if not words_a or not words_b:
        return 0.0

    words_b_set = set(words_b)
    common = sum(1 for word in words_a if word in words_b_set)
    return min(1.0, (common * 2) / (len(words_a) + len(words_b)))
