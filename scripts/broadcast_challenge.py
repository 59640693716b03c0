"""Broadcast attendance challenges through the speakers.

Plays a fresh ``FANVOTE:<contest>:AUTH:<now>`` challenge every few seconds
until interrupted. Run it on the machine feeding the venue PA system.

Usage:
    python scripts/broadcast_challenge.py 7
    python scripts/broadcast_challenge.py 7 --interval 10 --volume 30
"""

import argparse
import logging
import time

import sounddevice as sd

from fanvote.attendance.challenge import build_challenge
from fanvote.attendance.codec import GGWaveCodec
from fanvote.config import SAMPLE_RATE
from fanvote.log import configure_logging

logger = logging.getLogger("fanvote.scripts.broadcast")


def broadcast(contest_id: str, interval: float, volume: int, protocol_id: int) -> None:
    codec = GGWaveCodec(SAMPLE_RATE)
    try:
        while True:
            challenge = build_challenge(contest_id)
            waveform = codec.encode(challenge, protocol_id=protocol_id, volume=volume)
            logger.info("Broadcasting %s (%.2f s)", challenge, len(waveform) / SAMPLE_RATE)
            sd.play(waveform, SAMPLE_RATE)
            sd.wait()
            time.sleep(interval)
    finally:
        codec.close()


def main():
    parser = argparse.ArgumentParser(
        description="Broadcast attendance challenges over sound")
    parser.add_argument("contest_id", help="Contest identifier")
    parser.add_argument("--interval", type=float, default=5.0,
                        help="Pause between broadcasts in seconds (default: 5)")
    parser.add_argument("--volume", type=int, default=10,
                        help="ggwave volume, 0-100 (default: 10)")
    parser.add_argument("--protocol", type=int, default=1,
                        help="ggwave protocol id (default: 1, audible fast)")
    args = parser.parse_args()

    configure_logging()
    try:
        broadcast(args.contest_id, args.interval, args.volume, args.protocol)
    except KeyboardInterrupt:
        logger.info("Broadcast stopped")


if __name__ == "__main__":
    main()
