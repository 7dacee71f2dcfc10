"""
Send a test verification code through a running relay

Usage: python scripts/send_test_code.py +14155552671 [code] [--url http://localhost:8080]
"""

import argparse
import asyncio
import random
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import httpx
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from app.core.config import settings


async def send(url: str, phone: str, code: str) -> int:
    print(f"🧪 Sending code {code} to {phone} via {url}/ingest\n")

    try:
        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.post(
                f"{url}/ingest",
                json={"phone": phone, "authCode": code},
                headers={"Authorization": f"Bearer {settings.ENTRY_TOKEN}"}
            )
    except httpx.RequestError as e:
        print(f"❌ Relay not reachable: {e}")
        return 1

    print(f"Status: {response.status_code}")
    print(f"📥 Response: {response.text[:500]}")

    if response.status_code == 200:
        print(f"\n✅ Forwarded via {response.json().get('dest')}. Check WhatsApp!")
        return 0

    print(f"\n❌ Relay returned {response.status_code}")
    return 1


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("phone", type=str)
    parser.add_argument("code", type=str, nargs="?", default=None)
    parser.add_argument("--url", type=str, default=f"http://localhost:{settings.PORT}")
    args = parser.parse_args()

    code = args.code or f"{random.randint(0, 999999):06d}"
    return asyncio.run(send(args.url.rstrip("/"), args.phone, code))


if __name__ == "__main__":
    sys.exit(main())
