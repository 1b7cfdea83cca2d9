"""
Voice settings and generation option schemas.

Request schemas for audio generation, validated locally before any
request is sent to the backend.

Dependencies: pydantic
System role: Audio generation request contracts
"""

import enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class AudioEncoding(str, enum.Enum):
    """
    Audio encodings supported by the TTS backend.

    Each encoding knows the MIME type and file extension of its output.
    """

    MP3 = "MP3"
    WAV = "WAV"
    LINEAR16 = "LINEAR16"
    OGG_OPUS = "OGG_OPUS"
    MULAW = "MULAW"
    ALAW = "ALAW"

    @property
    def mime_type(self) -> str:
        return _ENCODING_MIME_TYPES[self]

    @property
    def file_extension(self) -> str:
        return _ENCODING_EXTENSIONS[self]


_ENCODING_MIME_TYPES = {
    AudioEncoding.MP3: "audio/mpeg",
    AudioEncoding.WAV: "audio/wav",
    AudioEncoding.LINEAR16: "audio/pcm",
    AudioEncoding.OGG_OPUS: "audio/ogg",
    AudioEncoding.MULAW: "audio/basic",
    AudioEncoding.ALAW: "audio/basic",
}

_ENCODING_EXTENSIONS = {
    AudioEncoding.MP3: "mp3",
    AudioEncoding.WAV: "wav",
    AudioEncoding.LINEAR16: "wav",
    AudioEncoding.OGG_OPUS: "ogg",
    AudioEncoding.MULAW: "ulaw",
    AudioEncoding.ALAW: "alaw",
}


class SampleRate(int, enum.Enum):
    """Sample rates supported by the TTS backend, in hertz."""

    RATE_8000 = 8000
    RATE_16000 = 16000
    RATE_22050 = 22050
    RATE_24000 = 24000
    RATE_44100 = 44100
    RATE_48000 = 48000


class VoiceSettings(BaseModel):
    """Custom voice configuration for one generation request."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
    )

    language_code: str = Field(
        max_length=10,
        pattern=r"^[a-z]{2}-[A-Z]{2}$",
        description="Language and region code, e.g. en-US",
    )
    voice_name: str = Field(min_length=1, max_length=50, description="TTS voice name")
    speaking_rate: float = Field(ge=0.25, le=4.0, description="Speech rate multiplier")
    pitch: float = Field(ge=-20.0, le=20.0, description="Pitch adjustment in semitones")
    volume_gain: float = Field(ge=-96.0, le=16.0, description="Volume gain in dB")
    audio_encoding: AudioEncoding = Field(default=AudioEncoding.MP3)
    sample_rate_hertz: SampleRate = Field(default=SampleRate.RATE_24000)


class GenerationOptions(BaseModel):
    """Options accepted by the audio generation endpoint."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    custom_voice_settings: VoiceSettings | None = Field(
        default=None,
        description="Voice override; the user's default TTS config is used when absent",
    )
    enable_summarization: bool = Field(default=True)
    enable_translation: bool = Field(default=False)

    def to_payload(self) -> dict:
        """
        Serialize to the camelCase request body.

        Returns:
            dict: JSON-ready body without unset voice settings
        """
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
