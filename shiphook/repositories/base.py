"""Base repository providing common MongoDB CRUD helpers."""

from enum import Enum
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar, Union

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel
from pymongo.collection import Collection
from pymongo.database import Database


class CollectionName(str, Enum):
    CLUSTERS = "clusters"
    WATCHES = "watches"
    WATCH_VERSIONS = "watch_versions"
    GITHUB_INSTALLATIONS = "github_installations"


T = TypeVar("T", bound=BaseModel)


class BaseRepository(Generic[T]):
    """Base repository providing common CRUD operations for MongoDB collections."""

    def __init__(
        self,
        db: Database,
        collection_name: Union[CollectionName, str],
        model_class: Type[T],
    ):
        self.db = db
        self.collection_name: str = (
            collection_name.value
            if isinstance(collection_name, CollectionName)
            else collection_name
        )
        self.collection: Collection = db[self.collection_name]
        self.model_class = model_class

    def find_one(self, query: Dict[str, Any]) -> Optional[T]:
        doc = self.collection.find_one(query)
        return self._to_model(doc)

    def find_many(
        self,
        query: Dict[str, Any],
        sort: Optional[List[tuple]] = None,
        limit: Optional[int] = None,
    ) -> List[T]:
        cursor = self.collection.find(query)
        if sort:
            cursor = cursor.sort(sort)
        if limit:
            cursor = cursor.limit(limit)
        return [self._to_model(doc) for doc in cursor]

    def _to_model(self, doc: Optional[Dict[str, Any]]) -> Optional[T]:
        if not doc:
            return None
        return self.model_class.model_validate(doc)

    def _to_object_id(
        self, entity_id: Union[str, ObjectId, None]
    ) -> Optional[ObjectId]:
        if entity_id is None:
            return None
        if isinstance(entity_id, ObjectId):
            return entity_id
        try:
            return ObjectId(entity_id)
        except (InvalidId, TypeError):
            return None
