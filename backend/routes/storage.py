# backend/routes/storage.py
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Request, UploadFile, File, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from repositories.storage import StorageRepository
from schemas.storage import StorageObjectOut
from utils.audit import write_log, client_ip
from utils.errors import StorageError
from utils.storage import get_storage, LocalStorage, public_path, full_url
from utils.tokenJWT import get_optional_user

router = APIRouter(prefix="/storage", tags=["Storage"])


def _out(request: Request, obj) -> StorageObjectOut:
    out = StorageObjectOut.model_validate(obj)
    out.public_url = full_url(request.base_url, public_path(obj.bucket_id, obj.name))
    return out


def _storage_error(e: StorageError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=str(e))


# Upload a new object; its name is "{identity_id}/{epoch_millis}.{ext}"
@router.post("/{bucket_id}", response_model=StorageObjectOut, status_code=status.HTTP_201_CREATED)
def upload_object(
    bucket_id: str,
    request: Request,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
    storage: LocalStorage = Depends(get_storage),
):
    try:
        content = file.file.read()
        obj = StorageRepository(db, current_user, storage).upload(bucket_id, file.filename, content, file.content_type)
    except StorageError as e:
        raise _storage_error(e)
    finally:
        file.file.close()

    write_log(db, user_id=current_user.id, action="OBJECT_UPLOAD", resource="storage", status="SUCCESS",
              ip=client_ip(request), meta={"bucket": bucket_id, "name": obj.name, "size": obj.size})
    return _out(request, obj)


# Public download
@router.get("/{bucket_id}/{name:path}")
def download_object(
    bucket_id: str,
    name: str,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
    storage: LocalStorage = Depends(get_storage),
):
    try:
        obj, path = StorageRepository(db, current_user, storage).open(bucket_id, name)
    except StorageError as e:
        raise _storage_error(e)
    return FileResponse(path, media_type=obj.content_type)


# Replace the content of an object under one's own folder
@router.put("/{bucket_id}/{name:path}", response_model=StorageObjectOut)
def replace_object(
    bucket_id: str,
    name: str,
    request: Request,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
    storage: LocalStorage = Depends(get_storage),
):
    try:
        content = file.file.read()
        obj = StorageRepository(db, current_user, storage).replace(bucket_id, name, content, file.content_type)
    except StorageError as e:
        raise _storage_error(e)
    finally:
        file.file.close()

    write_log(db, user_id=current_user.id, action="OBJECT_REPLACE", resource="storage", status="SUCCESS",
              ip=client_ip(request), meta={"bucket": bucket_id, "name": name, "size": obj.size})
    return _out(request, obj)


@router.delete("/{bucket_id}/{name:path}", status_code=status.HTTP_204_NO_CONTENT)
def delete_object(
    bucket_id: str,
    name: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
    storage: LocalStorage = Depends(get_storage),
):
    if not StorageRepository(db, current_user, storage).remove(bucket_id, name):
        raise HTTPException(status_code=404, detail="Object not found")
    write_log(db, user_id=current_user.id, action="OBJECT_DELETE", resource="storage", status="SUCCESS",
              ip=client_ip(request), meta={"bucket": bucket_id, "name": name})
