"""Celery tasks for account-related background processing."""

import logging

import requests
from celery import shared_task
from django.conf import settings

logger = logging.getLogger(__name__)

RESET_MESSAGE = (
    "Your UniLift password has been reset. Your new password is: {password}. "
    "Please log in and change it immediately."
)


@shared_task
def send_password_reset_sms(phone_number: str, new_password: str) -> bool:
    """
    Send a freshly generated password to the user's phone.

    Failures are logged and swallowed: the caller already answered the
    user with a generic message and there is nothing to retry against.
    """
    try:
        response = requests.post(
            settings.SMS_GATEWAY_URL,
            json={
                "to": phone_number,
                "body": RESET_MESSAGE.format(password=new_password),
            },
            timeout=settings.SMS_TIMEOUT_SECONDS,
        )
    except requests.RequestException as e:
        logger.error("SMS gateway unreachable for %s: %s", phone_number, e)
        return False

    if not response.ok:
        logger.error(
            "Failed to send password reset SMS to %s: %s %s",
            phone_number, response.status_code, response.text
        )
        return False

    logger.info("Password reset SMS sent to %s", phone_number)
    return True
