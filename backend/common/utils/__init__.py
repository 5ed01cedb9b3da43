"""Common utility functions."""

from .contact import format_phone_number, generate_random_password

__all__ = [
    "format_phone_number",
    "generate_random_password",
]
