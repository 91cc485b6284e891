import uuid
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from repositories.categories import CategoryRepository
from schemas.category import CategoryOut
from utils.tokenJWT import get_optional_user

router = APIRouter(prefix="/categories", tags=["Categories"])

# Categories are public and read-only; there are no mutation endpoints


@router.get("", response_model=List[CategoryOut])
def list_categories(db: Session = Depends(get_db), current_user: Optional[User] = Depends(get_optional_user)):
    return CategoryRepository(db, current_user).list()


@router.get("/{category_id}", response_model=CategoryOut)
def get_category(
    category_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    category = CategoryRepository(db, current_user).get(category_id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category
