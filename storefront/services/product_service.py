from sqlalchemy.orm import Session

from storefront.repos.product_repo import ProductRepo


class ProductService:
    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    def list_products(self):
        return self.repo.list_products()
