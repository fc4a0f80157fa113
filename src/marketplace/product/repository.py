"""Read paths over the Product aggregate."""

from marketplace.domain import marketplace
from marketplace.product.product import Product, ProductStatus

_SORT_KEYS = {
    "price-asc": (lambda p: p.price, False),
    "price-desc": (lambda p: p.price, True),
    "newest": (lambda p: p.created_at, True),
    "best-selling": (lambda p: p.sold_count or 0, True),
}


@marketplace.repository(part_of=Product)
class ProductRepository:
    def browse(
        self,
        category_id=None,
        seller_id=None,
        search=None,
        min_price=None,
        max_price=None,
        sort=None,
        flash_sale=None,
        featured=None,
    ) -> list[Product]:
        """Products currently on sale, narrowed by the given filters.

        ``search`` matches the product name case-insensitively. ``sort`` is
        one of ``price-asc``, ``price-desc``, ``newest`` or ``best-selling``;
        anything else falls back to newest first.
        """
        products = self._dao.query.filter(is_available=True).all().items

        if category_id:
            products = [p for p in products if str(p.category_id) == str(category_id)]
        if seller_id:
            products = [p for p in products if str(p.seller_id) == str(seller_id)]
        if search:
            needle = search.lower()
            products = [p for p in products if needle in p.name.lower()]
        if min_price is not None:
            products = [p for p in products if p.price >= min_price]
        if max_price is not None:
            products = [p for p in products if p.price <= max_price]
        if flash_sale is not None:
            products = [p for p in products if bool(p.is_flash_sale) == flash_sale]
        if featured is not None:
            products = [p for p in products if bool(p.is_featured) == featured]

        key, reverse = _SORT_KEYS.get(sort, _SORT_KEYS["newest"])
        return sorted(products, key=key, reverse=reverse)

    def for_seller(self, seller_id, available=None) -> list[Product]:
        """Every product the seller has listed, newest first."""
        products = self._dao.query.filter(seller_id=str(seller_id)).all().items
        if available is not None:
            products = [p for p in products if bool(p.is_available) == available]
        return sorted(products, key=lambda p: p.created_at, reverse=True)

    def pending_review(self) -> list[Product]:
        products = self._dao.query.filter(status=ProductStatus.PENDING.value).all().items
        return sorted(products, key=lambda p: p.created_at)
