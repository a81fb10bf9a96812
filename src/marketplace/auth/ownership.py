"""Ownership authorization.

Learn: The only rule for mutations — the authenticated user must be the
item's owner. The item passed in must come fresh from the store (never
from the request body), and callers check existence first so a missing
item is a 404, not a 403.
"""

import structlog

from marketplace.auth.dependencies import CurrentIdentity
from marketplace.errors import ForbiddenError
from marketplace.records import Item

logger = structlog.get_logger()


def authorize_owner(identity: CurrentIdentity, item: Item) -> None:
    """Raise ForbiddenError unless `identity` owns `item`."""
    if item.user_id != identity.user_id:
        logger.warning(
            "items.forbidden",
            item_id=item.id,
            owner_id=item.user_id,
            user_id=identity.user_id,
        )
        raise ForbiddenError("You are not the owner of this item")
