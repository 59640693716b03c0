"""Listen on the microphone for a venue challenge.

Usage:
    python scripts/verify_attendance.py 7
    python scripts/verify_attendance.py 7 --timeout 60 --device 2
"""

import argparse
import asyncio
import sys

from fanvote.attendance import AttendanceAuthenticator
from fanvote.config import AttendanceSettings
from fanvote.log import configure_logging


def main():
    parser = argparse.ArgumentParser(
        description="Verify attendance by listening for the venue's challenge")
    parser.add_argument("contest_id", help="Contest identifier")
    parser.add_argument("--timeout", type=float, default=None,
                        help="Seconds to listen (default: FANVOTE_TIMEOUT or 30)")
    parser.add_argument("--device", default=None,
                        help="Input device index or name (default: system default)")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    configure_logging("DEBUG" if args.verbose else "INFO")
    device = int(args.device) if args.device and args.device.isdigit() else args.device

    authenticator = AttendanceAuthenticator.for_microphone(
        AttendanceSettings.from_env(),
        device=device,
        on_state_change=lambda state: print(f"[{state}]"),
    )
    result = asyncio.run(authenticator.authenticate(args.contest_id, args.timeout))

    print(result.message)
    sys.exit(0 if result.authenticated else 1)


if __name__ == "__main__":
    main()
