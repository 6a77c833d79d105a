# infrastructure/audio/__init__.py
from .pydub_mp3_encoder import PydubMp3Encoder, mp3_available
from .services import build_pipeline, default_codec_services
from .soundfile_pydub_decoder import SoundfilePydubDecoder
from .soundfile_vorbis_encoder import SoundfileVorbisEncoder, vorbis_available

__all__ = [
    "PydubMp3Encoder",
    "SoundfilePydubDecoder",
    "SoundfileVorbisEncoder",
    "build_pipeline",
    "default_codec_services",
    "mp3_available",
    "vorbis_available",
]
