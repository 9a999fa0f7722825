"""
ZipParents Onboarding.

Four-step profile wizard run once after sign-up:

1. Basic info - display name, zip code, age range
2. About you - bio, relationship status, children's ages
3. Interests
4. Privacy & photo

The wizard state is a plain value moved along by pure transitions
(state.py); only submit.py talks to the backend.
"""

from .payload import build_profile_update
from .state import (
    InvalidTransition,
    OnboardingState,
    OnboardingStep,
    advance,
    back,
    start,
)
from .submit import submit

__all__ = [
    "InvalidTransition",
    "OnboardingState",
    "OnboardingStep",
    "advance",
    "back",
    "build_profile_update",
    "start",
    "submit",
]
