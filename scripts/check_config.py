"""
Check relay configuration

Prints the loaded settings and the destination rotation order with
tokens masked, and exits non-zero when the relay would refuse to start.

Usage: python scripts/check_config.py
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from app.core.config import describe_config, read_environment, settings, validate_destinations
from utils.constants import DEFAULT_ENTRY_TOKEN
from app.core.exceptions import ConfigurationError


def main() -> int:
    print("=" * 60)
    print("  Relay Configuration Check")
    print("=" * 60 + "\n")

    environ = read_environment()
    for key, value in describe_config(settings, environ).items():
        print(f"{key}: {value if value is not None else '❌ Not set'}")

    destinations = settings.get_destinations()
    print(f"\nRotation order ({len(destinations)} destination(s)):")
    for index, dest in enumerate(destinations, start=1):
        print(f"  {index}. {dest.url}  channel={dest.channel or '❌ Not set'}")

    try:
        validate_destinations(destinations)
    except ConfigurationError as e:
        print(f"\n❌ {e}")
        return 1

    if settings.ENTRY_TOKEN == DEFAULT_ENTRY_TOKEN:
        print("\n⚠️  ENTRY_TOKEN is the default value. Override it before deploying.")

    print("\n✅ Configuration is valid")
    return 0


if __name__ == "__main__":
    sys.exit(main())
