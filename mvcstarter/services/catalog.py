"""In-memory product/category store used by the example product controller.

Stands in for a real data-access layer; swap it for a repository backed by
the configured database.
"""

import logging
import threading
from dataclasses import asdict, dataclass, replace
from typing import Dict, List, Optional


logger = logging.getLogger(__name__)


class ProductNotFound(KeyError):
    pass


class CategoryNotFound(KeyError):
    pass


@dataclass(frozen=True)
class Category:
    id: int
    name: str


@dataclass(frozen=True)
class Product:
    id: int
    name: str
    price: float
    category_id: int

    def to_dict(self) -> dict:
        return asdict(self)


class ProductCatalog:
    def __init__(self, categories: Optional[List[Category]] = None):
        self._lock = threading.Lock()
        self._categories: Dict[int, Category] = {c.id: c for c in (categories or [])}
        self._products: Dict[int, Product] = {}
        self._next_id = 1

    def categories(self) -> List[Category]:
        return sorted(self._categories.values(), key=lambda c: c.id)

    def get_category(self, category_id: int) -> Category:
        try:
            return self._categories[category_id]
        except KeyError:
            raise CategoryNotFound(category_id)

    def list(self, category_id: Optional[int] = None) -> List[Product]:
        products = sorted(self._products.values(), key=lambda p: p.id)
        if category_id is not None:
            products = [p for p in products if p.category_id == category_id]
        return products

    def get(self, product_id: int) -> Product:
        try:
            return self._products[product_id]
        except KeyError:
            raise ProductNotFound(product_id)

    def create(self, name: str, price: float, category_id: int) -> Product:
        self.get_category(category_id)
        with self._lock:
            product = Product(id=self._next_id, name=name, price=price, category_id=category_id)
            self._products[product.id] = product
            self._next_id += 1
        logger.info(f"Created product {product.id} ({product.name})")
        return product

    def update(self, product_id: int, **changes) -> Product:
        if changes.get("category_id") is not None:
            self.get_category(changes["category_id"])
        with self._lock:
            product = self.get(product_id)
            product = replace(product, **{k: v for k, v in changes.items() if v is not None})
            self._products[product_id] = product
        logger.info(f"Updated product {product_id}")
        return product

    def delete(self, product_id: int) -> None:
        with self._lock:
            self.get(product_id)
            del self._products[product_id]
        logger.info(f"Deleted product {product_id}")


def default_catalog() -> ProductCatalog:
    return ProductCatalog(categories=[Category(1, "General"), Category(2, "Accessories")])
