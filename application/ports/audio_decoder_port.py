# application/ports/audio_decoder_port.py
# Port interface for turning raw file bytes into PCM samples.

from abc import ABC, abstractmethod

from looptrim.models import DecodedAudio


class IAudioDecoder(ABC):
    """Abstract base class for audio decoders."""

    @abstractmethod
    def decode(self, data: bytes, filename: str = "") -> DecodedAudio:
        """
        Decode an in-memory audio file.

        Args:
            data:     Complete file contents.
            filename: Original file name, used as a container hint.

        Returns:
            DecodedAudio with float32 samples shaped (num_frames, channels).

        Raises:
            DecodeError: The bytes are not decodable audio.
        """
        ...
