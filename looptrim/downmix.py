import numpy as np

from looptrim.models import DecodedAudio


def downmix_to_mono(audio: DecodedAudio, start_index: int, end_index: int) -> np.ndarray:
    """
    Collapse ``audio[start_index:end_index]`` to a float32 mono buffer.

    Mono input is copied as-is. Multi-channel input is averaged per frame,
    dividing by the real channel count. The sum runs in float64 so identical
    channels average back to exactly their shared value.
    """
    segment: np.ndarray = audio.samples[start_index:end_index]

    if audio.channel_count == 1:
        return segment[:, 0].copy()

    total: np.ndarray = segment.astype(np.float64).sum(axis=1)
    return (total / audio.channel_count).astype(np.float32)
