"""Row-level authorization policies.

Every table is deny-by-default: an operation is allowed only when at least
one policy covering that table and operation grants it.

A policy has two halves, mirroring a database RLS policy:

* ``using`` builds a SQL predicate that filters which existing rows the
  requesting identity can see (select) or target (update/delete). Rows that
  fail it are silently left out, never reported as an error.
* ``check`` validates a new or modified row in Python (insert/update). A
  failing check raises :class:`PolicyViolation`.

When a policy has no explicit ``check`` for an update, its ``using`` rule is
evaluated against the new row instead, like ``WITH CHECK`` defaulting to
``USING``.
"""
import enum
import uuid
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from sqlalchemy import and_, false, or_, true

from models.product import Product
from models.profile import Profile
from models.storage import StorageObject
from utils.errors import PolicyViolation

PRODUCT_IMAGES_BUCKET = "product-images"


class Operation(str, enum.Enum):
    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


ALL_OPERATIONS = frozenset(Operation)


@dataclass(frozen=True)
class Policy:
    name: str
    table: str
    operations: frozenset
    using: Optional[Callable[[Optional[uuid.UUID]], Any]] = None
    check: Optional[Callable[[Optional[uuid.UUID], Any], bool]] = None
    # Python twin of ``using`` for rows that are not in the database yet
    using_row: Optional[Callable[[Optional[uuid.UUID], Any], bool]] = None


def _is(uid, value) -> bool:
    return uid is not None and value == uid


def _column_is(column, uid):
    if uid is None:
        return false()
    return column == uid


def folder_segments(name: str) -> List[str]:
    """Folders of an object name, without the file name ("a/b/c.png" -> ["a", "b"]).

    Empty segments are kept: "/a/c.png" has "" as its first folder, so it is
    owned by nobody, the same as the SQL prefix match on "{uid}/".
    """
    return name.split("/")[:-1]


def object_owner_segment(name: str) -> Optional[str]:
    folders = folder_segments(name or "")
    return folders[0] if folders else None


def _owns_object_path(uid) -> Any:
    if uid is None:
        return false()
    return and_(
        StorageObject.bucket_id == PRODUCT_IMAGES_BUCKET,
        StorageObject.name.startswith(f"{uid}/", autoescape=True),
    )


def _owns_object_row(uid, row) -> bool:
    return (
        uid is not None
        and row.bucket_id == PRODUCT_IMAGES_BUCKET
        and object_owner_segment(row.name) == str(uid)
    )


POLICIES: List[Policy] = [
    # profiles
    Policy(
        name="Users can view their own profile",
        table="profiles",
        operations=frozenset({Operation.SELECT}),
        using=lambda uid: _column_is(Profile.id, uid),
    ),
    Policy(
        name="Users can update their own profile",
        table="profiles",
        operations=frozenset({Operation.UPDATE}),
        using=lambda uid: _column_is(Profile.id, uid),
        using_row=lambda uid, row: _is(uid, row.id),
    ),
    Policy(
        name="Users can insert their own profile",
        table="profiles",
        operations=frozenset({Operation.INSERT}),
        check=lambda uid, row: _is(uid, row.id),
    ),
    # categories: read-only for everybody, including anonymous callers
    Policy(
        name="Anyone can view categories",
        table="categories",
        operations=frozenset({Operation.SELECT}),
        using=lambda uid: true(),
    ),
    # products
    Policy(
        name="Anyone can view active products",
        table="products",
        operations=frozenset({Operation.SELECT}),
        using=lambda uid: Product.is_active.is_(True),
    ),
    Policy(
        name="Sellers can manage their own products",
        table="products",
        operations=ALL_OPERATIONS,
        using=lambda uid: _column_is(Product.seller_id, uid),
        using_row=lambda uid, row: _is(uid, row.seller_id),
    ),
    # storage objects
    Policy(
        name="Anyone can view product images",
        table="storage_objects",
        operations=frozenset({Operation.SELECT}),
        using=lambda uid: StorageObject.bucket_id == PRODUCT_IMAGES_BUCKET,
    ),
    Policy(
        name="Sellers can upload product images",
        table="storage_objects",
        operations=frozenset({Operation.INSERT}),
        check=lambda uid, row: uid is not None and row.bucket_id == PRODUCT_IMAGES_BUCKET,
    ),
    Policy(
        name="Sellers can update their product images",
        table="storage_objects",
        operations=frozenset({Operation.UPDATE}),
        using=_owns_object_path,
        using_row=_owns_object_row,
    ),
    Policy(
        name="Sellers can delete their product images",
        table="storage_objects",
        operations=frozenset({Operation.DELETE}),
        using=_owns_object_path,
    ),
]


def policies_for(table: str, operation: Operation) -> List[Policy]:
    return [p for p in POLICIES if p.table == table and operation in p.operations]


def using_clause(table: str, operation: Operation, uid: Optional[uuid.UUID]):
    """SQL predicate selecting the rows ``uid`` may target with ``operation``.

    Permissive policies are OR-ed together; no applicable policy means no rows.
    """
    clauses = [p.using(uid) for p in policies_for(table, operation) if p.using is not None]
    if not clauses:
        return false()
    return or_(*clauses)


def row_passes_check(table: str, operation: Operation, uid: Optional[uuid.UUID], row) -> bool:
    for policy in policies_for(table, operation):
        if policy.check is not None:
            if policy.check(uid, row):
                return True
        elif policy.using_row is not None and policy.using_row(uid, row):
            return True
    return False


def enforce_check(table: str, operation: Operation, uid: Optional[uuid.UUID], row) -> None:
    if not row_passes_check(table, operation, uid, row):
        raise PolicyViolation(table)
