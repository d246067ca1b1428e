from typing import List

from app.features.scan.schemas.correction import Correction


class PlausibilityFilter:
    """
    Deterministic rejection of low-quality candidates.

    Runs before and after the validator with the same rules. Keeps input order.
    An empty result means "no issues found", not an error.
    """

    CONFIDENCE_THRESHOLD = 0.8
    MAX_CORRECTION_LENGTH = 200
    MAX_SURROUNDING_LENGTH = int(MAX_CORRECTION_LENGTH * 1.5)

    @staticmethod
    def apply(corrections: List[Correction], source_text: str) -> List[Correction]:
        confident = [
            c for c in corrections
            if c.probability_of_correctness >= PlausibilityFilter.CONFIDENCE_THRESHOLD
        ]

        changed = [c for c in confident if c.corrected_text != c.original_text]

        # Oversized spans are usually hallucinated
        short = [
            c for c in changed
            if len(c.corrected_text) <= PlausibilityFilter.MAX_CORRECTION_LENGTH
            and len(c.surrounding_text) <= PlausibilityFilter.MAX_SURROUNDING_LENGTH
        ]

        present = [c for c in short if c.surrounding_text in source_text]

        seen = set()
        unique: List[Correction] = []
        for correction in present:
            if correction.original_text in seen:
                continue
            seen.add(correction.original_text)
            unique.append(correction)

        return unique
