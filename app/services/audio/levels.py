"""Loudness metering for decoded PCM blocks."""
from typing import Sequence, Union

import numpy as np

FULL_SCALE = 32768.0


def compute_rms(samples: Union[np.ndarray, Sequence[int]]) -> float:
    """
    Reduce a block of signed 16-bit samples to a level in [0, 1].

    Samples are normalized by 32768 before the root-mean-square is taken.
    The result is clamped to 1.0 so a full-scale negative block cannot
    overflow the meter.
    """
    block = np.asarray(samples, dtype=np.float64)
    if block.size == 0:
        return 0.0

    normalized = block / FULL_SCALE
    rms = float(np.sqrt(np.mean(normalized * normalized)))
    return min(1.0, rms)
