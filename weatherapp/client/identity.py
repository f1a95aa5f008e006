"""Anonymous per-profile user id. Not authentication: anyone holding the id is that user."""

import uuid

from .storage import JsonStore

USER_ID_KEY = "weather_app_user_id"


def get_user_id(store: JsonStore) -> str:
    """Return the stored id, creating and persisting a random one on first use."""
    user_id = store.get(USER_ID_KEY)
    if not user_id:
        user_id = str(uuid.uuid4())
        store.set(USER_ID_KEY, user_id)
    return user_id
