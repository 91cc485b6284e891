# backend/routes/products.py
import logging
import uuid
from decimal import Decimal
from typing import Optional, List, Literal
from fastapi import (
    APIRouter, Depends, HTTPException, Query, Request,
    UploadFile, File, Form, status
)
from sqlalchemy.orm import Session

from database import get_db
from utils.tokenJWT import get_current_user, get_optional_user
from utils.audit import write_log, client_ip
from utils.errors import StorageError, ProductUnavailable
from utils.policies import PRODUCT_IMAGES_BUCKET
from utils.storage import get_storage, LocalStorage, public_path, full_url
from models.users import User
from models.product import Product
from repositories.categories import CategoryRepository
from repositories.products import ProductRepository
from repositories.storage import StorageRepository
import schemas.product as product_schemas

router = APIRouter(prefix="/products", tags=["Products"])
logger = logging.getLogger(__name__)

# Columns that may not be cleared with an explicit null
_NOT_NULL = {"name", "price", "quantity", "is_active"}


def _money(value: float) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"))


def _ensure_category(db: Session, current_user: Optional[User], category_id: Optional[uuid.UUID]):
    if category_id is not None and CategoryRepository(db, current_user).get(category_id) is None:
        raise HTTPException(status_code=400, detail="Category not found")


def _upload_image(request: Request, db: Session, current_user: User, storage: LocalStorage, file: UploadFile) -> Optional[str]:
    """Store the product image; any failure leaves the product without an image."""
    try:
        content = file.file.read()
        obj = StorageRepository(db, current_user, storage).upload(
            PRODUCT_IMAGES_BUCKET, file.filename, content, file.content_type
        )
        return full_url(request.base_url, public_path(obj.bucket_id, obj.name))
    except (StorageError, OSError) as e:
        logger.error("Error uploading image: %s", e)
        return None
    finally:
        file.file.close()


# =========================
# MARKETPLACE LISTING
# =========================
@router.get("", response_model=product_schemas.ProductListPage)
def list_products(
    q: Optional[str] = Query(None, description="Search by name or description"),
    category_id: Optional[uuid.UUID] = Query(None),
    seller_id: Optional[uuid.UUID] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(12, ge=1, le=100),
    sort_by: Literal["created_at", "price", "name", "quantity"] = "created_at",
    order: Literal["asc", "desc"] = "desc",
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    items, total = ProductRepository(db, current_user).list(
        active_only=True, seller_id=seller_id, category_id=category_id, q=q,
        sort_by=sort_by, order=order, page=page, page_size=page_size,
    )
    return {"items": items, "total": total, "page": page, "page_size": page_size}


# Seller's own listings, inactive ones included
@router.get("/mine", response_model=List[product_schemas.ProductOut])
def list_my_products(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ProductRepository(db, current_user).list_own()


# =========================
# SINGLE PRODUCT
# =========================
@router.get("/{product_id}", response_model=product_schemas.ProductOut)
def get_product(
    product_id: uuid.UUID,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    product = ProductRepository(db, current_user).get(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


# =========================
# ADD PRODUCT
# =========================
@router.post("", response_model=product_schemas.ProductOut, status_code=status.HTTP_201_CREATED)
def add_product(
    request: Request,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
    storage: LocalStorage = Depends(get_storage),
    file: Optional[UploadFile] = File(None),
    name: str = Form(..., min_length=1),
    price: float = Form(..., ge=0),
    quantity: int = Form(0, ge=0),
    description: Optional[str] = Form(None),
    category_id: Optional[uuid.UUID] = Form(None),
):
    _ensure_category(db, current_user, category_id)

    image_url = None
    if file is not None and file.filename and current_user is not None:
        image_url = _upload_image(request, db, current_user, storage, file)

    new_product = Product(
        seller_id=current_user.id if current_user else None,
        name=name, description=description, price=_money(price),
        quantity=quantity, category_id=category_id, image_url=image_url,
    )
    new_product = ProductRepository(db, current_user).insert(new_product)

    write_log(
        db, user_id=current_user.id, action="PRODUCT_CREATE", resource="products",
        status="SUCCESS", ip=client_ip(request),
        meta={"id": str(new_product.id), "has_image": image_url is not None}
    )
    return new_product


# =========================
# PARTIAL EDIT (owner only)
# =========================
@router.patch("/{product_id}", response_model=product_schemas.ProductOut)
def edit_product(
    product_id: uuid.UUID,
    payload: product_schemas.ProductEditRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    changes = {
        k: v for k, v in payload.model_dump(exclude_unset=True).items()
        if not (v is None and k in _NOT_NULL)
    }
    if "price" in changes:
        changes["price"] = _money(changes["price"])
    if "category_id" in changes:
        _ensure_category(db, current_user, changes["category_id"])

    product = ProductRepository(db, current_user).update(product_id, changes)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    write_log(
        db, user_id=current_user.id, action="PRODUCT_EDIT", resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"product_id": str(product.id), "fields": sorted(changes)}
    )
    return product


# =========================
# DELETE (owner only)
# =========================
@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: uuid.UUID,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    if not ProductRepository(db, current_user).delete(product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    write_log(db, user_id=current_user.id, action="PRODUCT_DELETE", resource="products",
              status="SUCCESS", ip=client_ip(request), meta={"id": str(product_id)})


# =========================
# PURCHASE ("add to cart")
# =========================
@router.post("/{product_id}/purchase", response_model=product_schemas.ProductOut)
def purchase_product(
    product_id: uuid.UUID,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    try:
        product = ProductRepository(db, current_user).purchase(product_id)
    except ProductUnavailable:
        write_log(db, user_id=current_user.id, action="PURCHASE", resource="products", status="FAIL",
                  ip=client_ip(request), meta={"product_id": str(product_id), "reason": "out of stock"})
        raise HTTPException(status_code=409, detail="Product unavailable: this product is currently out of stock")
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    write_log(db, user_id=current_user.id, action="PURCHASE", resource="products", status="SUCCESS",
              ip=client_ip(request), meta={"product_id": str(product.id), "remaining": product.quantity})
    return product
