# utils/notify.py
import logging

logger = logging.getLogger(__name__)


def log_reset_link(email: str, link: str):
    # No mail transport is configured; the link is relayed from the server log
    logger.warning("Password reset requested for %s: %s", email, link)
