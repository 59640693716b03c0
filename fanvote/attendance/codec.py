"""Acoustic codec adapters.

A codec turns one buffer of captured audio into zero or one decoded text
message. The production codec wraps the ggwave data-over-sound modem; tests
plug in scripted codecs through the same interface.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

import numpy as np

from fanvote.config import SAMPLE_RATE

logger = logging.getLogger(__name__)

# ggwave_SampleFormat values
GGWAVE_SAMPLE_FORMAT_I8 = 2
GGWAVE_SAMPLE_FORMAT_F32 = 5

DEFAULT_PROTOCOL_ID = 1
DEFAULT_VOLUME = 10


def to_int8(samples: np.ndarray) -> np.ndarray:
    """Convert float amplitudes in [-1.0, 1.0] to signed 8-bit samples.

    Values are scaled by 128, floored and clamped to [-128, 127]. A bare
    cast would wrap 1.0 around to -128.
    """
    scaled = np.floor(np.asarray(samples, dtype=np.float32) * 128.0)
    return np.clip(scaled, -128, 127).astype(np.int8)


class AcousticCodec(ABC):
    """Capability to decode short text messages from PCM buffers."""

    def open(self) -> None:
        """Acquire codec resources. Called once before the first decode."""

    def close(self) -> None:
        """Release codec resources. Safe to call more than once."""

    @abstractmethod
    def decode(self, samples: np.ndarray) -> str | None:
        """Feed one float32 buffer; return a message if one completed.

        Implementations must not raise for corrupted audio; a buffer that
        yields nothing returns None.
        """
        pass


class GGWaveCodec(AcousticCodec):
    """ggwave modem configured for signed 8-bit input at a fixed sample rate."""

    def __init__(self, sample_rate: int = SAMPLE_RATE):
        self.sample_rate = sample_rate
        self._ggwave: Any = None
        self._instance: Any = None

    @property
    def is_open(self) -> bool:
        return self._instance is not None

    def open(self) -> None:
        if self.is_open:
            return
        import ggwave

        ggwave.disableLog()
        parameters = ggwave.getDefaultParameters()
        parameters["sampleRateInp"] = self.sample_rate
        parameters["sampleRateOut"] = self.sample_rate
        parameters["sampleFormatInp"] = GGWAVE_SAMPLE_FORMAT_I8
        parameters["sampleFormatOut"] = GGWAVE_SAMPLE_FORMAT_F32
        self._ggwave = ggwave
        self._instance = ggwave.init(parameters)
        logger.debug("ggwave instance %s ready at %d Hz", self._instance, self.sample_rate)

    def close(self) -> None:
        if self._instance is not None:
            self._ggwave.free(self._instance)
            self._instance = None

    def decode(self, samples: np.ndarray) -> str | None:
        if not self.is_open:
            raise RuntimeError("codec is not open")
        try:
            payload = self._ggwave.decode(self._instance, to_int8(samples).tobytes())
        except Exception as e:
            logger.warning("ggwave decode error: %s", e)
            return None
        if not payload:
            return None
        try:
            message = payload.decode("utf-8")
        except UnicodeDecodeError:
            logger.debug("Discarding non-UTF-8 payload of %d bytes", len(payload))
            return None
        logger.info("ggwave decoded message: %s", message)
        return message

    def encode(
        self,
        text: str,
        protocol_id: int = DEFAULT_PROTOCOL_ID,
        volume: int = DEFAULT_VOLUME,
    ) -> np.ndarray:
        """Render ``text`` as a float32 waveform at this codec's sample rate."""
        self.open()
        waveform = self._ggwave.encode(
            text, protocolId=protocol_id, volume=volume, instance=self._instance
        )
        return np.frombuffer(waveform, dtype=np.float32)
