# backend/routes/profiles.py
import uuid
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.profile import Profile
from models.users import User
from repositories.profiles import ProfileRepository
from schemas.profile import ProfileCreate, ProfileOut, ProfileUpdate
from utils.audit import write_log, client_ip
from utils.tokenJWT import get_current_user, get_optional_user

router = APIRouter(prefix="/profiles", tags=["Profiles"])

# Columns that may not be cleared with an explicit null
_NOT_NULL = {"role"}


@router.get("/me", response_model=ProfileOut)
def get_my_profile(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    profile = ProfileRepository(db, current_user).get(current_user.id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


# Other identities' profiles are invisible, indistinguishable from missing ones
@router.get("/{profile_id}", response_model=ProfileOut)
def get_profile(
    profile_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    profile = ProfileRepository(db, current_user).get(profile_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


# Insert one's own profile (only needed when provisioning did not create it)
@router.post("", response_model=ProfileOut, status_code=status.HTTP_201_CREATED)
def create_profile(
    payload: ProfileCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    repo = ProfileRepository(db, current_user)
    row = Profile(id=payload.id, email=payload.email, full_name=payload.full_name, role=payload.role)
    if current_user is not None and payload.id == current_user.id and repo.exists(payload.id):
        raise HTTPException(status_code=409, detail="Profile already exists")

    profile = repo.insert(row)
    write_log(db, user_id=current_user.id, action="PROFILE_CREATE", resource="profiles",
              status="SUCCESS", ip=client_ip(request), meta={"id": str(profile.id)})
    return profile


def _apply_update(profile_id, payload: ProfileUpdate, request: Request, db: Session, current_user: Optional[User]):
    changes = {
        k: v for k, v in payload.model_dump(exclude_unset=True).items()
        if not (v is None and k in _NOT_NULL)
    }
    profile = ProfileRepository(db, current_user).update(profile_id, changes)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")

    write_log(db, user_id=current_user.id, action="PROFILE_UPDATE", resource="profiles",
              status="SUCCESS", ip=client_ip(request), meta={"fields": sorted(changes)})
    return profile


@router.patch("/me", response_model=ProfileOut)
def update_my_profile(
    payload: ProfileUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _apply_update(current_user.id, payload, request, db, current_user)


@router.patch("/{profile_id}", response_model=ProfileOut)
def update_profile(
    profile_id: uuid.UUID,
    payload: ProfileUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    return _apply_update(profile_id, payload, request, db, current_user)
