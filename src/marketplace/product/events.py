"""Domain events for the Product aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from marketplace.domain import marketplace


@marketplace.event(part_of="Product")
class ProductCreated:
    """A seller listed a new product, pending admin approval."""

    __version__ = 1

    product_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    name = String(required=True)
    price = Float(required=True)
    total_stock = Integer(required=True)
    created_at = DateTime(required=True)


@marketplace.event(part_of="Product")
class ProductUpdated:
    """A product's details or stock ledger were edited by its seller or an admin."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    price = Float(required=True)
    total_stock = Integer(required=True)
    is_available = Boolean(required=True)
    updated_at = DateTime(required=True)


@marketplace.event(part_of="Product")
class StockSold:
    """Stock was taken out of the ledger for an order line."""

    __version__ = 1

    product_id = Identifier(required=True)
    rule = String(required=True)
    size = String()
    quantity = Integer(required=True)
    size_changes = Text()  # JSON: [[size, new_quantity], ...]
    total_stock = Integer(required=True)
    is_available = Boolean(required=True)
    sold_at = DateTime(required=True)


@marketplace.event(part_of="Product")
class ProductWithdrawn:
    """The product was taken off sale without being deleted."""

    __version__ = 1

    product_id = Identifier(required=True)
    withdrawn_by = Identifier(required=True)
    withdrawn_at = DateTime(required=True)


@marketplace.event(part_of="Product")
class ProductModerated:
    """An admin approved, rejected or reset a product's moderation status."""

    __version__ = 1

    product_id = Identifier(required=True)
    status = String(required=True)
    moderator_id = Identifier(required=True)
    reason = Text()
    moderated_at = DateTime(required=True)


@marketplace.event(part_of="Product")
class ProductRatingUpdated:
    """The rating aggregate was recomputed after a review."""

    __version__ = 1

    product_id = Identifier(required=True)
    average = Float(required=True)
    count = Integer(required=True)
