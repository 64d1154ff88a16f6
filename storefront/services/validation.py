"""Checkout form validation"""

import re

from ..errors import ValidationError
from ..models.checkout import CheckoutForm

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")

# Indian mobile numbers, optionally with the +91 prefix
INDIA_PHONE_PATTERN = re.compile(r"^(\+91[\-\s]?)?[6-9]\d{9}$")
E164_PHONE_PATTERN = re.compile(r"^\+[1-9]\d{1,14}$")

PHONE_PATTERNS = {
    "IN": (INDIA_PHONE_PATTERN, "Please enter a valid 10-digit Indian mobile number"),
}
DEFAULT_PHONE_PATTERN = (
    E164_PHONE_PATTERN,
    "Please enter a valid phone number with country code (e.g., +1234567890)",
)

REQUIRED_FIELDS = {
    "email": "Email is required",
    "first_name": "First name is required",
    "last_name": "Last name is required",
    "address": "Address is required",
    "city": "City is required",
    "state": "State is required",
    "postal_code": "Postal code is required",
    "phone": "Phone number is required",
}


def validate_checkout_form(form: CheckoutForm, phone_region: str = "IN") -> CheckoutForm:
    """
    Check the contact and shipping fields.

    Returns the form with surrounding whitespace stripped.

    Raises:
        ValidationError: with a message per failing field
    """
    form = form.model_copy(
        update={
            name: value.strip()
            for name, value in form.model_dump().items()
            if isinstance(value, str)
        }
    )
    errors: dict[str, str] = {}

    for field_name, message in REQUIRED_FIELDS.items():
        if not getattr(form, field_name):
            errors[field_name] = message

    if form.email and not EMAIL_PATTERN.match(form.email):
        errors["email"] = "Please enter a valid email address"

    if form.phone:
        pattern, message = PHONE_PATTERNS.get(phone_region.upper(), DEFAULT_PHONE_PATTERN)
        if not pattern.match(form.phone):
            errors["phone"] = message

    if errors:
        raise ValidationError(errors)

    return form
