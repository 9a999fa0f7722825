"""Ordering of discovery results."""

from typing import Iterable

from zipparents.models.profile import PublicProfile


def _rank_key(profile: PublicProfile) -> tuple:
    has_distance = profile.distance is not None
    has_activity = profile.last_active is not None
    return (
        not has_distance,
        profile.distance if has_distance else 0.0,
        not has_activity,
        -profile.last_active.timestamp() if has_activity else 0.0,
    )


def rank_by_distance(profiles: Iterable[PublicProfile]) -> list[PublicProfile]:
    """
    Closest first; unknown distances last.

    Equal distances put the most recently active parent first, with a
    missing last_active counting as the oldest. The sort is stable, so
    profiles that tie on both keep their input order.
    """
    return sorted(profiles, key=_rank_key)
