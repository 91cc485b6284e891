# repositories/storage.py
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.storage import Bucket, StorageObject
from models.users import User
from repositories.base import PolicyRepository
from utils.errors import (
    BucketNotFound, InvalidMimeType, ObjectExists, ObjectNotFound, ObjectTooLarge, PolicyViolation
)
from utils.policies import Operation, enforce_check
from utils.storage import LocalStorage, object_name

logger = logging.getLogger(__name__)


class StorageRepository(PolicyRepository):
    """Bucket objects: metadata rows gated by the storage policies, bytes in ``LocalStorage``."""

    model = StorageObject

    def __init__(self, db: Session, identity: Optional[User] = None, backend: LocalStorage = None):
        super().__init__(db, identity)
        self.backend = backend or LocalStorage()

    def get_bucket(self, bucket_id: str) -> Bucket:
        bucket = self.db.get(Bucket, bucket_id)
        if bucket is None:
            raise BucketNotFound(f"Bucket not found: {bucket_id}")
        return bucket

    def _validate(self, bucket: Bucket, content: bytes, content_type: Optional[str]) -> None:
        if bucket.allowed_mime_types and content_type not in bucket.allowed_mime_types:
            raise InvalidMimeType(f"mime type {content_type} is not supported")
        if bucket.file_size_limit is not None and len(content) > bucket.file_size_limit:
            raise ObjectTooLarge("The object exceeded the maximum allowed size")

    def find(self, bucket_id: str, name: str, operation: Operation = Operation.SELECT) -> Optional[StorageObject]:
        return (
            self.query(operation)
            .filter(StorageObject.bucket_id == bucket_id, StorageObject.name == name)
            .first()
        )

    def upload(self, bucket_id: str, filename: str, content: bytes, content_type: Optional[str]) -> StorageObject:
        bucket = self.get_bucket(bucket_id)
        obj = StorageObject(
            bucket_id=bucket.id,
            name=object_name(self.uid, filename),
            owner_id=self.uid,
            content_type=content_type,
            size=len(content),
        )
        enforce_check(self.table, Operation.INSERT, self.uid, obj)
        self._validate(bucket, content, content_type)

        # The (bucket, name) unique constraint decides a name collision before any bytes are written
        self.db.add(obj)
        try:
            self.db.flush()
        except IntegrityError:
            self.db.rollback()
            raise ObjectExists("The resource already exists")

        try:
            self.backend.upload_file(bucket.id, obj.name, content)
        except OSError:
            self.db.rollback()
            raise
        self.db.commit()
        self.db.refresh(obj)
        logger.info("Stored %s/%s (%d bytes)", bucket.id, obj.name, obj.size)
        return obj

    def open(self, bucket_id: str, name: str):
        """Return (object row, file path) for a readable object."""
        obj = self.find(bucket_id, name)
        if obj is None:
            raise ObjectNotFound("Object not found")
        path = self.backend.path_for(bucket_id, name)
        if not path.exists():
            raise ObjectNotFound("Object not found")
        return obj, path

    def replace(self, bucket_id: str, name: str, content: bytes, content_type: Optional[str]) -> StorageObject:
        bucket = self.get_bucket(bucket_id)
        obj = self.find(bucket_id, name, Operation.UPDATE)
        if obj is None:
            raise ObjectNotFound("Object not found")
        self._validate(bucket, content, content_type)

        obj.content_type = content_type
        obj.size = len(content)
        try:
            enforce_check(self.table, Operation.UPDATE, self.uid, obj)
            # Bytes first: the row is only committed once they are on disk
            self.backend.upload_file(bucket_id, name, content)
        except (PolicyViolation, OSError):
            self.db.rollback()
            raise
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def remove(self, bucket_id: str, name: str) -> bool:
        obj = self.find(bucket_id, name, Operation.DELETE)
        if obj is None:
            return False
        self.delete(obj.id)
        self.backend.delete_file(bucket_id, name)
        return True
