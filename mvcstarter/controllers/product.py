from typing import Optional

from ..core.dispatch import Controller, action
from ..core.errors import BadRequestError, NotFoundError
from ..services.catalog import CategoryNotFound, ProductCatalog, ProductNotFound


class ProductController(Controller):
    """CRUD actions for the example product catalog."""

    @property
    def catalog(self) -> ProductCatalog:
        return self.context.services["catalog"]

    def _find(self, id: int):
        try:
            return self.catalog.get(id)
        except ProductNotFound:
            raise NotFoundError("The requested product does not exist.")

    @action
    def index(self, category_id: Optional[int] = None):
        products = self.catalog.list(category_id=category_id)
        return [product.to_dict() for product in products]

    @action
    def view(self, id: int):
        return self._find(id).to_dict()

    @action(methods=["POST"])
    def create(self, name: str, price: float, category_id: int):
        if not name.strip():
            raise BadRequestError("Product name cannot be blank.")
        try:
            product = self.catalog.create(name=name.strip(), price=price, category_id=category_id)
        except CategoryNotFound:
            raise BadRequestError(f"Unknown category: {category_id}")
        return self.redirect("product/view", id=product.id)

    @action(methods=["POST"])
    def update(self, id: int, name: Optional[str] = None, price: Optional[float] = None,
               category_id: Optional[int] = None):
        self._find(id)
        try:
            product = self.catalog.update(id, name=name, price=price, category_id=category_id)
        except CategoryNotFound:
            raise BadRequestError(f"Unknown category: {category_id}")
        return self.redirect("product/view", id=product.id)

    @action(methods=["POST"])
    def delete(self, id: int):
        self._find(id)
        self.catalog.delete(id)
        return self.redirect("product/index")
