from sqlalchemy import Column, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class StorageItem(Base):
    __tablename__ = "local_storage"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)


class KeyValueStorage:
    """String keys to string values, one row per key."""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def get_item(self, key: str):
        db = self.session_factory()
        try:
            item = db.get(StorageItem, key)
            return item.value if item else None
        finally:
            db.close()

    def set_item(self, key: str, value: str):
        db = self.session_factory()
        try:
            item = db.get(StorageItem, key)
            if item:
                item.value = value
            else:
                db.add(StorageItem(key=key, value=value))
            db.commit()
        finally:
            db.close()

    def remove_item(self, key: str):
        db = self.session_factory()
        try:
            item = db.get(StorageItem, key)
            if item:
                db.delete(item)
                db.commit()
        finally:
            db.close()
