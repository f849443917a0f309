"""Digest jobs: events, games, tv and shift."""

from . import events, games, shift, tv
from .base import EmailDigest, JobContext

JOBS = {
    "events": events.run,
    "games": games.run,
    "tv": tv.run,
    "shift": shift.run,
}

__all__ = ["JOBS", "EmailDigest", "JobContext", "events", "games", "shift", "tv"]
