from harmwatch.core.config import settings
from harmwatch.db.store import JsonStore

store = JsonStore(settings.data_dir)


def get_store() -> JsonStore:
    return store
