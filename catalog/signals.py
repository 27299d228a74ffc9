import logging

from django.contrib.auth.signals import user_logged_in
from django.dispatch import receiver

logger = logging.getLogger(__name__)


@receiver(user_logged_in)
def refresh_catalog_on_login(sender, request, user, **kwargs):
    """Re-read the catalog once an operator signs in, some collections may need authenticated reads."""
    from .apps import get_aggregator

    aggregator = get_aggregator()
    if aggregator is not None:
        logger.info('Refreshing catalog after login by %s', user.get_username())
        aggregator.refresh()
