"""
app/models/destination.py

Purpose: Destination record

- One WATI endpoint the relay can forward to
- Bearer token and sending channel for that endpoint
- Immutable for the lifetime of the process
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Destination:
    url: str
    token: str = field(repr=False)
    channel: str
