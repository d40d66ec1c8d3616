"""Provider-facing HTTP clients and the retrying transport they share."""

from .elevenlabs_client import ElevenLabsClient
from .transport import ResilientTransport

__all__ = ["ElevenLabsClient", "ResilientTransport"]
