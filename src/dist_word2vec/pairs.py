"""Skip-gram training pair generation."""

import random
from typing import Iterator, List, Tuple


def context_positions(pos: int, length: int, window: int, shrink: int) -> Iterator[int]:
    """Yield in-range context positions around ``pos``.

    Offsets run over ``[shrink, 2 * window - shrink]`` excluding the center,
    so a shrink of ``b`` gives an effective window of ``window - b``.

    Args:
        pos: Center position in the sentence
        length: Sentence length
        window: Maximum window size
        shrink: Random window reduction in ``[0, window)``
    """
    for offset in range(shrink, 2 * window + 1 - shrink):
        if offset == window:
            continue
        c = pos - window + offset
        if 0 <= c < length:
            yield c


def generate_skipgram_pairs(
    sentence: List[int], window: int, rng: random.Random
) -> Iterator[Tuple[int, int]]:
    """Yield (center, context) word pairs for one sentence chunk.

    Exactly one shrink value is drawn per position, in position order, so the
    pairs depend only on the sentence, the window and the RNG state.
    """
    length = len(sentence)
    for pos in range(length):
        shrink = rng.randrange(window)
        for c in context_positions(pos, length, window, shrink):
            yield sentence[pos], sentence[c]
