import logging
from typing import Dict, Iterable, List, Optional, Set

from .symbols import ScoredWord, ScoreReport, WordCandidate

logger = logging.getLogger(__name__)

LETTER_SCORES_EN = {
    **{c: 1 for c in list("AEILNORSTU")},
    **{c: 2 for c in list("DG")},
    **{c: 3 for c in list("BCMP")},
    **{c: 4 for c in list("FHVWY")},
    "K": 5,
    **{c: 8 for c in list("JX")},
    **{c: 10 for c in list("QZ")},
}

# French tile values (no diacritics on tiles)
LETTER_SCORES_FR = {
    **{c: 1 for c in list("AEILNORSTU")},
    **{c: 2 for c in list("DGM")},
    **{c: 3 for c in list("BCP")},
    **{c: 4 for c in list("FHV")},
    **{c: 8 for c in list("JQ")},
    **{c: 10 for c in list("KWXYZ")},
}

LANGUAGES = ("EN", "FR")


def scores_for_lang(lang: str) -> Dict[str, int]:
    return LETTER_SCORES_FR if lang.upper() == 'FR' else LETTER_SCORES_EN


def load_dictionary(path: str) -> Set[str]:
    with open(path, "r", encoding="utf-8") as f:
        words = (line.strip() for line in f)
        return {w.lower() for w in words if w and w[0].isalpha()}


def word_points(word: str, letter_scores: Optional[Dict[str, int]] = None) -> int:
    table = LETTER_SCORES_EN if letter_scores is None else letter_scores
    return sum(table.get(ch, 0) for ch in word.upper())


def score_words(
    candidates: Iterable[WordCandidate],
    dictionary: Set[str],
    letter_scores: Optional[Dict[str, int]] = None,
) -> ScoreReport:
    """Keep dictionary words and total their face values.

    Words missing from the dictionary are dropped without a trace; the
    result is sorted by text, case-insensitively.
    """
    words: List[ScoredWord] = []
    rejected = 0
    for cand in candidates:
        if cand.text.lower() not in dictionary:
            rejected += 1
            continue
        words.append(ScoredWord(text=cand.text, points=word_points(cand.text, letter_scores)))
    words.sort(key=lambda w: w.text.lower())
    total = sum(w.points for w in words)
    logger.debug(f"Scorer: {len(words)} valid, {rejected} not in dictionary, total {total}")
    return ScoreReport(words=words, total=total)
