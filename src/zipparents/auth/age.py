"""
Age verification.

Members must be 18 or older.
"""

from datetime import date

MINIMUM_AGE = 18
MAXIMUM_AGE = 120


def calculate_age(date_of_birth: date, today: date | None = None) -> int:
    """Whole years between `date_of_birth` and `today`."""
    today = today or date.today()
    age = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


def is_age_verified(date_of_birth: date, today: date | None = None) -> bool:
    return calculate_age(date_of_birth, today) >= MINIMUM_AGE


def age_verification_error(date_of_birth: date | None, today: date | None = None) -> str | None:
    """User-facing error for an unacceptable date of birth, or None if fine."""
    if date_of_birth is None:
        return "Date of birth is required"

    age = calculate_age(date_of_birth, today)
    if age < MINIMUM_AGE:
        return "You must be 18 or older to use ZipParents"
    if age > MAXIMUM_AGE:
        return "Please enter a valid date of birth"
    return None
