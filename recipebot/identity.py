import logging

from recipebot.errors import PersistenceError
from recipebot.models import User
from recipebot.repository import Repository
from recipebot.updates import Sender


logger = logging.getLogger(__name__)


async def resolve_user(repository: Repository, sender: Sender) -> User:
    """Get or create the user behind `sender`, refreshing display fields on drift."""
    fields = {
        "username": sender.username,
        "first_name": sender.first_name,
        "last_name": sender.last_name,
    }

    user = await repository.get_user_by_telegram_id(sender.id)
    if user is None:
        user = await repository.create_user(telegram_id=sender.id, **fields)
        if user is not None:
            logger.info("Created user %s for telegram id %s", user.id, sender.id)
            return user
        # Another update from the same sender got there first.
        user = await repository.get_user_by_telegram_id(sender.id)
        if user is None:
            raise PersistenceError("resolve_user", f"user {sender.id} vanished")

    if user.display_fields() != (sender.username, sender.first_name, sender.last_name):
        logger.debug("Refreshing display fields for user %s", user.id)
        user = await repository.update_user(telegram_id=sender.id, **fields)

    return user
