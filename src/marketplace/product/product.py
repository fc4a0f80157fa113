"""Product aggregate (CQRS): a seller's listing with a per-size stock ledger.

Stock Model:
    size_stock:   ordered ledger of {size, quantity}; quantities never negative
    total_stock:  sum of the ledger when one exists, otherwise set directly
    is_available: false whenever total_stock is 0

The derived fields are recomputed by ``refresh_stock`` at every mutation
site and verified by post-invariants, so a persisted product can never
disagree with its own ledger.

Moderation:
    pending → approved | rejected (admin), and back to pending on reset
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from marketplace.domain import marketplace
from marketplace.product.events import (
    ProductCreated,
    ProductModerated,
    ProductRatingUpdated,
    ProductUpdated,
    ProductWithdrawn,
    StockSold,
)
from marketplace.product.stock import (
    Size,
    StockRequest,
    StockRule,
    check_stock,
    derive_stock,
    live_total,
    plan_decrement,
)


class ProductStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@marketplace.value_object(part_of="Product")
class Rating:
    """Average star rating and number of reviews behind it."""

    average = Float(default=0.0, min_value=0.0, max_value=5.0)
    count = Integer(default=0, min_value=0)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@marketplace.entity(part_of="Product")
class SizeStock:
    size = String(required=True, choices=Size)
    quantity = Integer(required=True, min_value=0, default=0)


@marketplace.entity(part_of="Product")
class Variation:
    """A purchasable variation such as a colour or material."""

    name = String(max_length=100)
    value = String(max_length=100)
    price_adjustment = Float(default=0.0)
    image = String(max_length=500)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@marketplace.aggregate
class Product:
    seller_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    description = Text(required=True)
    price = Float(required=True, min_value=0.0)
    original_price = Float(min_value=0.0)
    discount = Float(default=0.0, min_value=0.0, max_value=100.0)
    category_id = Identifier()
    images = Text()  # JSON: list of image references
    size_stock = HasMany(SizeStock)
    variations = HasMany(Variation)
    total_stock = Integer(default=0, min_value=0)
    is_available = Boolean(default=True)
    status = String(choices=ProductStatus, default=ProductStatus.PENDING.value)
    rejection_reason = Text()
    approved_at = DateTime()
    approved_by = Identifier()
    rejected_at = DateTime()
    rejected_by = Identifier()
    is_featured = Boolean(default=False)
    is_flash_sale = Boolean(default=False)
    rating = ValueObject(Rating)
    sold_count = Integer(default=0, min_value=0)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def total_stock_matches_size_ledger(self):
        if self.size_stock and self.total_stock != live_total(self.size_stock):
            raise ValidationError({"total_stock": ["Total stock must equal the sum of the size ledger"]})

    @invariant.post
    def unavailable_without_stock(self):
        if not self.total_stock and self.is_available:
            raise ValidationError({"is_available": ["A product without stock cannot be available"]})

    @invariant.post
    def sizes_must_be_unique(self):
        sizes = [entry.size for entry in self.size_stock]
        if len(sizes) != len(set(sizes)):
            raise ValidationError({"size_stock": ["Each size may appear only once in the stock ledger"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        seller_id,
        name,
        description,
        price,
        category_id=None,
        original_price=None,
        discount=0.0,
        images=None,
        size_stock=None,
        total_stock=0,
        variations=None,
        is_featured=False,
        is_flash_sale=False,
    ):
        """List a new product. New listings start out pending approval.

        Args:
            size_stock: List of ``{"size": ..., "quantity": ...}`` dicts.
            total_stock: Stock count for products without a size ledger.
            variations: List of ``{"name", "value", "price_adjustment", "image"}`` dicts.
        """
        now = datetime.now(UTC)
        ledger = [SizeStock(size=entry["size"], quantity=entry.get("quantity", 0)) for entry in size_stock or []]
        total, in_stock = derive_stock(ledger, total_stock)

        product = cls(
            seller_id=seller_id,
            name=name,
            description=description,
            price=price,
            original_price=original_price if original_price is not None else price,
            discount=discount or 0.0,
            category_id=category_id,
            images=json.dumps(list(images or [])),
            size_stock=ledger,
            variations=[Variation(**variation) for variation in variations or []],
            total_stock=total,
            is_available=in_stock,
            status=ProductStatus.PENDING.value,
            is_featured=is_featured,
            is_flash_sale=is_flash_sale,
            rating=Rating(average=0.0, count=0),
            sold_count=0,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductCreated(
                product_id=str(product.id),
                seller_id=str(seller_id),
                name=name,
                price=price,
                total_stock=total,
                created_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Derived stock fields
    # -------------------------------------------------------------------
    def refresh_stock(self, relist=False):
        """Recompute ``total_stock`` and ``is_available`` from the ledger.

        A product without stock is always unavailable. With ``relist`` a
        product that has stock again is put back on sale; otherwise its
        availability is left as it was.
        """
        total, in_stock = derive_stock(self.size_stock, self.total_stock)
        self.total_stock = total
        if not in_stock:
            self.is_available = False
        elif relist:
            self.is_available = True

    def image_list(self):
        return json.loads(self.images) if self.images else []

    def size_quantities(self):
        return {entry.size: entry.quantity for entry in self.size_stock}

    # -------------------------------------------------------------------
    # Seller edits
    # -------------------------------------------------------------------
    def update(
        self,
        name=None,
        description=None,
        price=None,
        original_price=None,
        discount=None,
        category_id=None,
        images=None,
        size_stock=None,
        total_stock=None,
        variations=None,
        is_featured=None,
        is_flash_sale=None,
    ):
        """Apply a partial edit. Derived stock fields are recomputed on every edit."""
        now = datetime.now(UTC)

        with atomic_change(self):
            if name is not None:
                self.name = name
            if description is not None:
                self.description = description
            if price is not None:
                self.price = price
                if original_price is None:
                    self.original_price = price
            if original_price is not None:
                self.original_price = original_price
            if discount is not None:
                self.discount = discount
            if category_id is not None:
                self.category_id = category_id
            if images is not None:
                self.images = json.dumps(list(images))
            if is_featured is not None:
                self.is_featured = is_featured
            if is_flash_sale is not None:
                self.is_flash_sale = is_flash_sale
            if variations is not None:
                for variation in list(self.variations):
                    self.remove_variations(variation)
                for variation in variations:
                    self.add_variations(Variation(**variation))

            stock_touched = size_stock is not None or total_stock is not None
            if size_stock is not None:
                self._replace_ledger(size_stock)
            if total_stock is not None and not self.size_stock:
                self.total_stock = total_stock

            self.refresh_stock(relist=stock_touched)
            self.updated_at = now

        self.raise_(
            ProductUpdated(
                product_id=str(self.id),
                name=self.name,
                price=self.price,
                total_stock=self.total_stock,
                is_available=self.is_available,
                updated_at=now,
            )
        )

    def _replace_ledger(self, size_stock):
        wanted = {}
        for entry in size_stock:
            wanted[entry["size"]] = entry.get("quantity", 0)

        for existing in list(self.size_stock):
            if existing.size in wanted:
                existing.quantity = wanted.pop(existing.size)
            else:
                self.remove_size_stock(existing)

        for size, quantity in wanted.items():
            self.add_size_stock(SizeStock(size=size, quantity=quantity))

    def restock(self, size, quantity):
        """Set the quantity held for one size, adding the size if it is new."""
        if quantity is None or quantity < 0:
            raise ValidationError({"quantity": ["Quantity cannot be negative"]})

        ledger = [{"size": entry.size, "quantity": entry.quantity} for entry in self.size_stock]
        existing = next((entry for entry in ledger if entry["size"] == size), None)
        if existing is not None:
            existing["quantity"] = quantity
        else:
            ledger.append({"size": size, "quantity": quantity})

        self.update(size_stock=ledger)

    # -------------------------------------------------------------------
    # Selling
    # -------------------------------------------------------------------
    def check_supply(self, quantity, size=None):
        """Check that ``quantity`` units (of ``size``) could be sold right now, without taking them."""
        return check_stock(self.name, self.size_stock, self.total_stock, StockRequest.of(quantity, size))

    def sell(self, quantity, size=None):
        """Take ``quantity`` units (of ``size``, if given) out of stock.

        The request is checked against the current ledger and every new
        quantity is planned before anything is changed, so a rejected
        request leaves the product untouched.
        """
        request = StockRequest.of(quantity, size)
        decision = check_stock(self.name, self.size_stock, self.total_stock, request)
        changes = plan_decrement(self.name, self.size_stock, decision)
        now = datetime.now(UTC)

        with atomic_change(self):
            if decision.rule == StockRule.UNSIZED:
                self.total_stock = self.total_stock - decision.quantity
            for changed_size, new_quantity in changes:
                entry = next(e for e in self.size_stock if e.size == changed_size)
                entry.quantity = new_quantity

            self.sold_count = (self.sold_count or 0) + decision.quantity
            self.refresh_stock()
            self.updated_at = now

        self.raise_(
            StockSold(
                product_id=str(self.id),
                rule=decision.rule.value,
                size=decision.size,
                quantity=decision.quantity,
                size_changes=json.dumps(changes),
                total_stock=self.total_stock,
                is_available=self.is_available,
                sold_at=now,
            )
        )
        return decision

    # -------------------------------------------------------------------
    # Availability and moderation
    # -------------------------------------------------------------------
    def withdraw(self, withdrawn_by):
        """Take the product off sale. The record stays for order history."""
        now = datetime.now(UTC)
        self.is_available = False
        self.updated_at = now

        self.raise_(
            ProductWithdrawn(
                product_id=str(self.id),
                withdrawn_by=str(withdrawn_by),
                withdrawn_at=now,
            )
        )

    def toggle_availability(self):
        if not self.is_available and not self.total_stock:
            raise ValidationError({"is_available": ["A product without stock cannot be made available"]})
        self.is_available = not self.is_available
        self.updated_at = datetime.now(UTC)

    def set_promotion(self, is_featured=None, is_flash_sale=None, discount=None):
        with atomic_change(self):
            if is_featured is not None:
                self.is_featured = is_featured
            if is_flash_sale is not None:
                self.is_flash_sale = is_flash_sale
            if discount is not None:
                self.discount = discount
            self.updated_at = datetime.now(UTC)

    def moderate(self, status, moderator_id, reason=None):
        try:
            target = ProductStatus(status)
        except ValueError:
            raise ValidationError({"status": [f"Invalid product status '{status}'"]}) from None

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = target.value
            if target == ProductStatus.APPROVED:
                self.approved_at = now
                self.approved_by = moderator_id
                self.rejection_reason = None
                self.refresh_stock(relist=True)
            elif target == ProductStatus.REJECTED:
                if not reason or not reason.strip():
                    raise ValidationError({"reason": ["Rejection reason is required"]})
                self.is_available = False
                self.rejected_at = now
                self.rejected_by = moderator_id
                self.rejection_reason = reason
            self.updated_at = now

        self.raise_(
            ProductModerated(
                product_id=str(self.id),
                status=target.value,
                moderator_id=str(moderator_id),
                reason=reason,
                moderated_at=now,
            )
        )

    def record_rating(self, ratings):
        """Recompute the rating aggregate from every rating the product has received."""
        ratings = list(ratings)
        count = len(ratings)
        average = round(sum(ratings) / count, 1) if count else 0.0
        self.rating = Rating(average=average, count=count)

        self.raise_(
            ProductRatingUpdated(
                product_id=str(self.id),
                average=average,
                count=count,
            )
        )
