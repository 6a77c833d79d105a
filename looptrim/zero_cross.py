import numpy as np


def find_nearest_zero_cross(samples: np.ndarray, target: int, radius: int) -> int:
    """
    Return the zero crossing closest to *target* within +/- *radius* samples.

    Index ``i`` counts as a crossing when ``samples[i]`` or ``samples[i + 1]``
    is exactly zero, or when the pair has strictly opposite signs. The scan
    window is ``[max(0, target - radius), min(n - 2, target + radius)]``.
    On equal distance the lower index wins. When the window holds no crossing
    the target is returned unchanged.

    Args:
        samples: 1-D reference signal (channel 0 of the decoded audio).
        target:  Sample index to adjust.
        radius:  Search radius in samples.

    Returns:
        Adjusted sample index.
    """
    samples = np.asarray(samples)
    n: int = len(samples)
    if n < 2:
        return target

    lo: int = max(0, target - radius)
    hi: int = min(n - 2, target + radius)
    if hi < lo:
        return target

    left: np.ndarray = samples[lo:hi + 1]
    right: np.ndarray = samples[lo + 1:hi + 2]

    crossing: np.ndarray = (
        (left == 0)
        | (right == 0)
        | ((left > 0) & (right < 0))
        | ((left < 0) & (right > 0))
    )
    hits: np.ndarray = np.flatnonzero(crossing) + lo
    if hits.size == 0:
        return target

    # argmin returns the first minimum, i.e. the lower index on a tie
    best: int = int(hits[np.argmin(np.abs(hits - target))])
    return best
