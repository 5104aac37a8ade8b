from flask import current_app

from cleancity.storage.base import Storage
from cleancity.storage.database import DatabaseStorage
from cleancity.storage.memory import MemStorage

BACKENDS = {
    'database': DatabaseStorage,
    'memory': MemStorage,
}

def build_storage(name) -> Storage:
    try:
        return BACKENDS[name]()
    except KeyError:
        raise ValueError(f"Unknown storage backend {name!r}, expected one of {sorted(BACKENDS)}") from None

def get_storage() -> Storage:
    return current_app.extensions['cleancity.storage']

__all__ = ['Storage', 'DatabaseStorage', 'MemStorage', 'build_storage', 'get_storage']
