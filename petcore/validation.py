# validation.py

import re
from typing import Optional

from pydantic import BaseModel

MAX_NAME_LENGTH = 30
SLOT_NUMBERS = (1, 2, 3)
BLOCKED_WORDS = ('admin', 'system', 'null', 'undefined', 'test', 'delete', 'drop')

# Letters and digits from any script, plus spaces, hyphens and apostrophes.
NAME_PATTERN = re.compile(r"^(?:[^\W_]|[\s'-])+$")


class ValidationResult(BaseModel):
    is_valid: bool
    error: str = ''
    recovery: Optional[str] = None


def _invalid(error, recovery):
    return ValidationResult(is_valid=False, error=error, recovery=recovery)


def validate_pet_name(name) -> ValidationResult:
    if not isinstance(name, str):
        return _invalid('Pet name must be text.', 'Please enter a valid name using letters and numbers.')
    trimmed = name.strip()
    if not trimmed:
        return _invalid('Pet name cannot be empty.', 'Please enter a name for your pet (1-30 characters).')
    if len(trimmed) > MAX_NAME_LENGTH:
        return _invalid('Pet name cannot exceed 30 characters.',
                        'Please choose a shorter name (maximum 30 characters).')
    if not NAME_PATTERN.match(trimmed):
        return _invalid('Pet name can only contain letters, numbers, spaces, hyphens, and apostrophes.',
                        'Please remove any special characters and try again.')
    if name != trimmed:
        return _invalid('Pet name cannot start or end with spaces.',
                        'Please remove leading or trailing spaces.')
    lowered = trimmed.lower()
    if any(word in lowered for word in BLOCKED_WORDS):
        return _invalid('Pet name contains inappropriate content.', 'Please choose a different name.')
    return ValidationResult(is_valid=True)


def validate_save_slot(slot) -> ValidationResult:
    if slot is None:
        return _invalid('No save slot selected.', 'Please select a save slot (1, 2, or 3).')
    if isinstance(slot, bool) or not isinstance(slot, int) or slot not in SLOT_NUMBERS:
        return _invalid('Invalid save slot. Must be 1, 2, or 3.', 'Please select a valid save slot.')
    return ValidationResult(is_valid=True)
