#!/usr/bin/env python3
"""
Seed demo parent profiles for local discovery testing.

Creates `users` documents spread over the zip codes the distance table
knows about, so search and nearby results have something to rank. The
documents have no matching auth accounts; they cannot log in.

Usage:
    python scripts/seed_profiles.py [--count 40] [--seed 7] [--dry-run]
"""

import argparse
import os
import random
import uuid
from datetime import datetime, timedelta, timezone

from dotenv import load_dotenv
from supabase import create_client

from zipparents.discovery.zipcode import ZIP_CODE_COORDINATES
from zipparents.models.user import (
    AgeRange,
    ChildrenAgeRange,
    PrivacySettings,
    ProfileVisibility,
    RelationshipStatus,
)
from zipparents.profiles.constants import INTERESTS
from zipparents.config import settings
from zipparents.profiles.validation import calculate_profile_completeness

load_dotenv()

FIRST_NAMES = [
    "Alex", "Sam", "Jordan", "Taylor", "Morgan", "Casey", "Riley", "Jamie",
    "Avery", "Quinn", "Robin", "Drew", "Harper", "Rowan", "Emerson", "Kai",
]

BIOS = [
    "Coffee first, playground second.",
    "Looking for weekend playdate buddies nearby.",
    "New to the neighborhood and hoping to meet other parents.",
    "Dad of two, amateur baker, always up for a park meetup.",
    "",
]


def get_supabase():
    url = os.getenv("SUPABASE_URL")
    key = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
    if not url or not key:
        raise ValueError("Missing SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY")
    return create_client(url, key)


def build_profile(rng: random.Random, index: int) -> dict:
    now = datetime.now(timezone.utc)
    name = f"{rng.choice(FIRST_NAMES)} {chr(ord('A') + index % 26)}."
    visibility = rng.choices(
        [ProfileVisibility.PUBLIC, ProfileVisibility.VERIFIED_ONLY, ProfileVisibility.PRIVATE],
        weights=[8, 2, 1],
    )[0]
    privacy = PrivacySettings(
        show_email=False,
        show_phone=False,
        show_exact_location=rng.random() < 0.5,
        profile_visibility=visibility,
    )
    profile = {
        "id": str(uuid.uuid4()),
        "email": f"demo{index}@example.com",
        "display_name": name,
        "bio": rng.choice(BIOS),
        "zip_code": rng.choice(list(ZIP_CODE_COORDINATES)),
        "age_range": rng.choice(list(AgeRange)).value,
        "interests": rng.sample(INTERESTS, rng.randint(3, 6)),
        "children_age_ranges": [r.value for r in rng.sample(list(ChildrenAgeRange), rng.randint(1, 2))],
        "relationship_status": rng.choice(list(RelationshipStatus)).value,
        "privacy_settings": privacy.model_dump(mode="json"),
        "email_verified": True,
        "age_verified": True,
        "verification_status": "verified" if rng.random() < 0.3 else "unverified",
        "role": "user",
        "status": "active",
        "onboarding_completed": True,
        "last_active": (now - timedelta(hours=rng.randint(0, 72))).isoformat(),
        "created_at": now.isoformat(),
        "updated_at": now.isoformat(),
    }
    profile["profile_completeness"] = calculate_profile_completeness(profile, settings.min_interests)
    return profile


def main():
    parser = argparse.ArgumentParser(description="Seed demo parent profiles")
    parser.add_argument("--count", type=int, default=40, help="Number of profiles")
    parser.add_argument("--seed", type=int, default=7, help="Random seed")
    parser.add_argument("--dry-run", action="store_true", help="Print instead of inserting")
    args = parser.parse_args()

    rng = random.Random(args.seed)
    profiles = [build_profile(rng, i) for i in range(args.count)]

    if args.dry_run:
        for p in profiles[:10]:
            print(f"  {p['display_name']:<12} {p['zip_code']}  {p['privacy_settings']['profile_visibility']}")
        if len(profiles) > 10:
            print(f"  ... and {len(profiles) - 10} more")
        return

    client = get_supabase()
    client.table("users").upsert(profiles).execute()
    print(f"Seeded {len(profiles)} profiles")


if __name__ == "__main__":
    main()
