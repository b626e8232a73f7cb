"""Word-overlap similarity between a lyrics body and a query fragment.

Scores fall into four bands:

- ``1.0`` -- the normalized query appears verbatim inside the lyrics;
- ``0.9`` -- every query word appears somewhere in the lyrics, but not as
  one contiguous phrase;
- ``matched / total`` -- proportional credit for partial word overlap;
- ``0.0`` -- nothing matches, or either side is empty after normalization.

Word matching is exact after normalization: no stemming, no edit distance.
"""

from songmatch.utils.text_normalizer import normalize_text, split_words

EXACT_MATCH_SCORE = 1.0
ALL_WORDS_MATCH_SCORE = 0.9


def calculate_similarity(lyrics: str, query: str) -> float:
    """Score how well *query* matches *lyrics*.

    Args:
        lyrics: The song's lyric text.
        query: The user's lyric fragment (typed or transcribed).

    Returns:
        A similarity score in ``[0.0, 1.0]``.
    """
    normalized_lyrics = normalize_text(lyrics)
    normalized_query = normalize_text(query)

    if not normalized_lyrics or not normalized_query:
        return 0.0

    query_words = split_words(normalized_query)
    if not query_words:
        return 0.0

    if normalized_query in normalized_lyrics:
        return EXACT_MATCH_SCORE

    lyric_words = set(split_words(normalized_lyrics))
    matched = sum(1 for word in query_words if word in lyric_words)
    ratio = matched / len(query_words)

    if ratio == 1:
        return ALL_WORDS_MATCH_SCORE

    return ratio
