# services/validation.py
import math
import re
from typing import Any, Dict

from services.errors import ValidationError

MIN_WEIGHT_KG = 30
MAX_WEIGHT_KG = 300
MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 100

_MOBILE_PATTERN = re.compile(r'^[0-9]{10}$')
_UNSAFE_NAME_CHARS = re.compile(r'[<>"\'&]')


def validate_mobile(mobile: Any) -> bool:
    """True iff mobile is exactly 10 decimal digits"""
    if not isinstance(mobile, str):
        return False
    return _MOBILE_PATTERN.fullmatch(mobile) is not None


def validate_weight(weight: Any) -> bool:
    """True iff weight is a number in [30, 300] kg"""
    if isinstance(weight, bool) or not isinstance(weight, (int, float)):
        return False
    if math.isnan(weight):
        return False
    return MIN_WEIGHT_KG <= weight <= MAX_WEIGHT_KG


def validate_name(name: Any) -> bool:
    if not isinstance(name, str):
        return False
    return MIN_NAME_LENGTH <= len(name.strip()) <= MAX_NAME_LENGTH


def sanitize_name(name: str) -> str:
    """Trim, then strip characters that are significant in markup"""
    return _UNSAFE_NAME_CHARS.sub('', name.strip()).strip()


def validate_registration(mobile: str, name: str, start_weight: float, target_weight: float) -> None:
    """Raise ValidationError with the first failing rule for a new participant"""
    if not validate_mobile(mobile):
        raise ValidationError("Invalid mobile number format")
    if not validate_name(name):
        raise ValidationError("Name must be between 2 and 100 characters")
    if not validate_weight(start_weight):
        raise ValidationError("Start weight must be between 30 and 300 kg")
    if not validate_weight(target_weight):
        raise ValidationError("Target weight must be between 30 and 300 kg")
    if target_weight >= start_weight:
        raise ValidationError("Target weight must be less than start weight")
    # Sanitizing can shorten the name below the minimum
    if not validate_name(sanitize_name(name)):
        raise ValidationError("Name must be between 2 and 100 characters")


def validate_participant_update(update_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Check the fields an administrator is allowed to edit and return a
    cleaned copy. Start/target ordering is only enforced at registration.
    """
    cleaned = dict(update_data)

    if 'name' in cleaned:
        if not validate_name(cleaned['name']):
            raise ValidationError("Name must be between 2 and 100 characters")
        cleaned['name'] = sanitize_name(cleaned['name'])
        if not validate_name(cleaned['name']):
            raise ValidationError("Name must be between 2 and 100 characters")

    for field, label in (('start_weight', 'Start weight'),
                         ('current_weight', 'Current weight'),
                         ('target_weight', 'Target weight')):
        if field in cleaned and not validate_weight(cleaned[field]):
            raise ValidationError(f"{label} must be between 30 and 300 kg")

    return cleaned
