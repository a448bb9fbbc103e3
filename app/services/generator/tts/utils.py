"""TTS utility functions."""

import math

# Average speaking rate used for duration estimates
WORDS_PER_SECOND = 2.5


def estimate_audio_duration(text: str) -> int:
    """Estimate spoken duration of ``text`` in whole seconds.

    Args:
        text: Sentence text

    Returns:
        ``ceil(words / 2.5)``, at least 1
    """
    words = len(text.split())
    return max(math.ceil(words / WORDS_PER_SECOND), 1)


__all__ = ["WORDS_PER_SECOND", "estimate_audio_duration"]
