from typing import List

from models.category import Category
from repositories.base import PolicyRepository


class CategoryRepository(PolicyRepository):
    model = Category

    def list(self) -> List[Category]:
        return self.query().order_by(Category.name.asc()).all()
