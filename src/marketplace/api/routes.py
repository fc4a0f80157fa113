"""FastAPI routes for the Marketplace: catalog, cart, orders, reviews and messages.

The acting identity arrives already verified in the ``X-Actor-Id`` and
``X-Actor-Role`` headers and is passed explicitly into every command.
"""

import json
import math
from datetime import datetime

from fastapi import APIRouter, Depends, Header, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from protean.utils.globals import current_domain

from marketplace.api.schemas import (
    AddToCartRequest,
    CartItemIdResponse,
    CreateProductRequest,
    MessageIdResponse,
    ModerateProductRequest,
    PlaceOrderRequest,
    ProductIdResponse,
    PromotionRequest,
    ReplyRequest,
    RestockRequest,
    ReviewIdResponse,
    SendMessageRequest,
    StatusResponse,
    SubmitReviewRequest,
    SyncCartRequest,
    UnreadCountResponse,
    UpdateCartItemRequest,
    UpdateOrderStatusRequest,
    UpdateProductRequest,
)
from marketplace.cart.cart import Cart
from marketplace.cart.items import AddToCart, RemoveFromCart, UpdateCartQuantity
from marketplace.cart.management import ClearCart, SyncCart
from marketplace.errors import Forbidden
from marketplace.messaging.inbox import conversation_between, conversations_for, unread_count
from marketplace.messaging.message import conversation_id_for
from marketplace.messaging.sending import MarkConversationRead, SendMessage
from marketplace.order.listing import all_orders, order_for_actor, orders_for_buyer, orders_for_seller
from marketplace.order.placement import place_order
from marketplace.order.status import UpdateOrderStatus
from marketplace.product.creation import CreateProduct
from marketplace.product.details import RestockSize, UpdateProduct
from marketplace.product.moderation import ModerateProduct, SetProductPromotion, ToggleProductAvailability
from marketplace.product.product import Product
from marketplace.product.removal import DeleteProduct, WithdrawProduct
from marketplace.review.listing import reviews_by_buyer, reviews_for_product, reviews_for_seller
from marketplace.review.reply import ReplyToReview
from marketplace.review.submission import SubmitReview
from marketplace.shared.actor import Actor, Role


# ---------------------------------------------------------------------------
# Acting identity
# ---------------------------------------------------------------------------
def current_actor(
    x_actor_id: str = Header(...),
    x_actor_role: str = Header(...),
) -> Actor:
    try:
        role = Role(x_actor_role)
    except ValueError:
        raise Forbidden(f"Unknown role '{x_actor_role}'") from None
    return Actor(id=x_actor_id, role=role.value)


def require_role(*roles: Role):
    def dependency(actor: Actor = Depends(current_actor)) -> Actor:
        if actor.role not in {role.value for role in roles}:
            raise Forbidden("Access denied")
        return actor

    return dependency


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------
def _product_view(product):
    data = product.to_dict()
    data["images"] = product.image_list()
    return jsonable_encoder(data)


def _order_view(order, items=None, total_amount=None):
    data = order.to_dict()
    data["status_history"] = [change.to_dict() for change in order.history()]
    if items is not None:
        data["items"] = [item.to_dict() for item in items]
        data["total_amount"] = total_amount
    return jsonable_encoder(data)


def _review_view(review):
    data = review.to_dict()
    data["images"] = review.image_list()
    return jsonable_encoder(data)


def _message_view(message):
    return jsonable_encoder(message.to_dict())


def _cart_view(cart):
    data = cart.to_dict()
    data["items"] = [{**item.to_dict(), "line_total": item.line_total} for item in cart.items]
    data["total_amount"] = cart.total_amount
    return jsonable_encoder(data)


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.get("")
async def browse_products(
    category: str | None = None,
    seller: str | None = None,
    search: str | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
    sort: str | None = None,
    flash_sale: bool | None = None,
) -> JSONResponse:
    products = current_domain.repository_for(Product).browse(
        category_id=category,
        seller_id=seller,
        search=search,
        min_price=min_price,
        max_price=max_price,
        sort=sort,
        flash_sale=flash_sale,
    )
    return JSONResponse(content={"products": [_product_view(p) for p in products], "total": len(products)})


@product_router.get("/{product_id}")
async def get_product(product_id: str) -> JSONResponse:
    product = current_domain.repository_for(Product).get(product_id)
    return JSONResponse(content={"product": _product_view(product)})


@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def create_product(
    body: CreateProductRequest,
    actor: Actor = Depends(require_role(Role.SELLER, Role.ADMIN)),
) -> ProductIdResponse:
    command = CreateProduct(
        actor_id=actor.id,
        actor_role=actor.role,
        seller_id=body.seller_id,
        name=body.name,
        description=body.description,
        price=body.price,
        original_price=body.original_price,
        discount=body.discount,
        category_id=body.category_id,
        images=json.dumps(body.images),
        size_stock=json.dumps([entry.model_dump() for entry in body.size_stock]),
        total_stock=body.total_stock,
        variations=json.dumps([variation.model_dump() for variation in body.variations]),
    )
    result = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=result)


@product_router.put("/{product_id}", response_model=StatusResponse)
async def update_product(
    product_id: str,
    body: UpdateProductRequest,
    actor: Actor = Depends(current_actor),
) -> StatusResponse:
    command = UpdateProduct(
        actor_id=actor.id,
        actor_role=actor.role,
        product_id=product_id,
        name=body.name,
        description=body.description,
        price=body.price,
        original_price=body.original_price,
        discount=body.discount,
        category_id=body.category_id,
        images=json.dumps(body.images) if body.images is not None else None,
        size_stock=(
            json.dumps([entry.model_dump() for entry in body.size_stock]) if body.size_stock is not None else None
        ),
        total_stock=body.total_stock,
        variations=(
            json.dumps([variation.model_dump() for variation in body.variations])
            if body.variations is not None
            else None
        ),
        is_featured=body.is_featured,
        is_flash_sale=body.is_flash_sale,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@product_router.put("/{product_id}/stock", response_model=StatusResponse)
async def restock_product(
    product_id: str,
    body: RestockRequest,
    actor: Actor = Depends(current_actor),
) -> StatusResponse:
    command = RestockSize(
        actor_id=actor.id,
        actor_role=actor.role,
        product_id=product_id,
        size=body.size,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@product_router.delete("/{product_id}", response_model=StatusResponse)
async def withdraw_product(product_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    command = WithdrawProduct(actor_id=actor.id, actor_role=actor.role, product_id=product_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Seller Router
# ---------------------------------------------------------------------------
seller_router = APIRouter(prefix="/seller", tags=["seller"])


@seller_router.get("/products")
async def seller_products(
    available: bool | None = None,
    actor: Actor = Depends(require_role(Role.SELLER)),
) -> JSONResponse:
    products = current_domain.repository_for(Product).for_seller(actor.id, available=available)
    return JSONResponse(content={"products": [_product_view(p) for p in products]})


@seller_router.get("/orders")
async def seller_orders(
    status: str | None = None,
    actor: Actor = Depends(require_role(Role.SELLER)),
) -> JSONResponse:
    views = orders_for_seller(actor.id, status=status)
    return JSONResponse(
        content={"orders": [_order_view(view.order, items=view.items, total_amount=view.total_amount) for view in views]}
    )


@seller_router.get("/reviews")
async def seller_reviews(actor: Actor = Depends(require_role(Role.SELLER))) -> JSONResponse:
    return JSONResponse(content={"reviews": [_review_view(r) for r in reviews_for_seller(actor.id)]})


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_router = APIRouter(prefix="/admin", tags=["admin"])


@admin_router.get("/products/pending")
async def pending_products(actor: Actor = Depends(require_role(Role.ADMIN))) -> JSONResponse:
    products = current_domain.repository_for(Product).pending_review()
    return JSONResponse(content={"products": [_product_view(p) for p in products]})


@admin_router.patch("/products/{product_id}/moderate", response_model=StatusResponse)
async def moderate_product(
    product_id: str,
    body: ModerateProductRequest,
    actor: Actor = Depends(current_actor),
) -> StatusResponse:
    command = ModerateProduct(
        actor_id=actor.id,
        actor_role=actor.role,
        product_id=product_id,
        status=body.status,
        reason=body.reason,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@admin_router.put("/products/{product_id}/toggle-availability")
async def toggle_product_availability(product_id: str, actor: Actor = Depends(current_actor)) -> JSONResponse:
    command = ToggleProductAvailability(actor_id=actor.id, actor_role=actor.role, product_id=product_id)
    is_available = current_domain.process(command, asynchronous=False)
    return JSONResponse(content={"product_id": product_id, "is_available": is_available})


@admin_router.put("/products/{product_id}/promotion", response_model=StatusResponse)
async def set_product_promotion(
    product_id: str,
    body: PromotionRequest,
    actor: Actor = Depends(current_actor),
) -> StatusResponse:
    command = SetProductPromotion(
        actor_id=actor.id,
        actor_role=actor.role,
        product_id=product_id,
        is_featured=body.is_featured,
        is_flash_sale=body.is_flash_sale,
        discount=body.discount,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@admin_router.delete("/products/{product_id}", response_model=StatusResponse)
async def delete_product(product_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    command = DeleteProduct(actor_id=actor.id, actor_role=actor.role, product_id=product_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@admin_router.get("/orders")
async def list_all_orders(
    status: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    actor: Actor = Depends(require_role(Role.ADMIN)),
) -> JSONResponse:
    orders, total = all_orders(status=status, placed_from=start_date, placed_to=end_date, page=page, limit=limit)
    return JSONResponse(
        content={
            "orders": [_order_view(order) for order in orders],
            "total": total,
            "total_pages": math.ceil(total / limit),
            "current_page": page,
        }
    )


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201)
async def create_order(
    body: PlaceOrderRequest,
    actor: Actor = Depends(require_role(Role.CLIENT)),
) -> JSONResponse:
    order = place_order(
        buyer_id=actor.id,
        items=[line.model_dump(exclude_none=True) for line in body.items],
        shipping_address=body.shipping_address.model_dump() if body.shipping_address else None,
        payment_method=body.payment_method,
    )
    return JSONResponse(
        status_code=201,
        content={"message": "Order placed successfully", "order": _order_view(order)},
    )


@order_router.get("")
async def my_orders(actor: Actor = Depends(require_role(Role.CLIENT))) -> JSONResponse:
    return JSONResponse(content={"orders": [_order_view(order) for order in orders_for_buyer(actor.id)]})


@order_router.get("/{order_id}")
async def get_order(order_id: str, actor: Actor = Depends(current_actor)) -> JSONResponse:
    return JSONResponse(content={"order": _order_view(order_for_actor(order_id, actor))})


@order_router.put("/{order_id}/status")
async def update_order_status(
    order_id: str,
    body: UpdateOrderStatusRequest,
    actor: Actor = Depends(current_actor),
) -> JSONResponse:
    command = UpdateOrderStatus(
        order_id=order_id,
        actor_id=actor.id,
        actor_role=actor.role,
        status=body.status,
        note=body.note,
    )
    current_domain.process(command, asynchronous=False)
    order = order_for_actor(order_id, actor)
    return JSONResponse(content={"message": "Order status updated", "order": _order_view(order)})


# ---------------------------------------------------------------------------
# Review Router
# ---------------------------------------------------------------------------
review_router = APIRouter(prefix="/reviews", tags=["reviews"])


@review_router.get("/product/{product_id}")
async def product_reviews(product_id: str) -> JSONResponse:
    return JSONResponse(content={"reviews": [_review_view(r) for r in reviews_for_product(product_id)]})


@review_router.get("/mine")
async def my_reviews(actor: Actor = Depends(require_role(Role.CLIENT))) -> JSONResponse:
    return JSONResponse(content={"reviews": [_review_view(r) for r in reviews_by_buyer(actor.id)]})


@review_router.post("", status_code=201, response_model=ReviewIdResponse)
async def submit_review(
    body: SubmitReviewRequest,
    actor: Actor = Depends(require_role(Role.CLIENT)),
) -> ReviewIdResponse:
    command = SubmitReview(
        buyer_id=actor.id,
        order_id=body.order_id,
        product_id=body.product_id,
        rating=body.rating,
        comment=body.comment,
        images=json.dumps(body.images),
    )
    result = current_domain.process(command, asynchronous=False)
    return ReviewIdResponse(review_id=result)


@review_router.post("/{review_id}/reply", response_model=StatusResponse)
async def reply_to_review(
    review_id: str,
    body: ReplyRequest,
    actor: Actor = Depends(require_role(Role.SELLER)),
) -> StatusResponse:
    command = ReplyToReview(review_id=review_id, seller_id=actor.id, comment=body.comment)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Message Router
# ---------------------------------------------------------------------------
message_router = APIRouter(prefix="/messages", tags=["messages"])


@message_router.get("/conversations")
async def conversations(actor: Actor = Depends(current_actor)) -> JSONResponse:
    summaries = [
        {**summary, "last_message": _message_view(summary["last_message"])} for summary in conversations_for(actor.id)
    ]
    return JSONResponse(content={"conversations": summaries})


@message_router.get("/conversation/{user_id}")
async def conversation(user_id: str, actor: Actor = Depends(current_actor)) -> JSONResponse:
    """The thread with ``user_id``. Opening it marks the messages received in it as read."""
    messages = [_message_view(m) for m in conversation_between(actor.id, user_id)]
    current_domain.process(
        MarkConversationRead(reader_id=actor.id, conversation_id=conversation_id_for(actor.id, user_id)),
        asynchronous=False,
    )
    return JSONResponse(content={"messages": messages})


@message_router.post("/send", status_code=201, response_model=MessageIdResponse)
async def send_message(body: SendMessageRequest, actor: Actor = Depends(current_actor)) -> MessageIdResponse:
    command = SendMessage(
        sender_id=actor.id,
        receiver_id=body.receiver_id,
        body=body.message,
        product_id=body.product_id,
    )
    result = current_domain.process(command, asynchronous=False)
    return MessageIdResponse(message_id=result)


@message_router.put("/read/{conversation_id}", response_model=StatusResponse)
async def mark_read(conversation_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    current_domain.process(
        MarkConversationRead(reader_id=actor.id, conversation_id=conversation_id),
        asynchronous=False,
    )
    return StatusResponse()


@message_router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(actor: Actor = Depends(current_actor)) -> UnreadCountResponse:
    return UnreadCountResponse(unread_count=unread_count(actor.id))


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


def _cart_response(buyer_id, message=None) -> JSONResponse:
    cart = current_domain.repository_for(Cart).open_for(buyer_id)
    content = {"cart": _cart_view(cart)}
    if message:
        content["message"] = message
    return JSONResponse(content=content)


@cart_router.get("")
async def get_cart(actor: Actor = Depends(require_role(Role.CLIENT))) -> JSONResponse:
    return _cart_response(actor.id)


@cart_router.post("")
async def sync_cart(body: SyncCartRequest, actor: Actor = Depends(require_role(Role.CLIENT))) -> JSONResponse:
    command = SyncCart(buyer_id=actor.id, items=json.dumps([line.model_dump() for line in body.items]))
    current_domain.process(command, asynchronous=False)
    return _cart_response(actor.id, "Cart synced")


@cart_router.post("/items", status_code=201, response_model=CartItemIdResponse)
async def add_to_cart(
    body: AddToCartRequest,
    actor: Actor = Depends(require_role(Role.CLIENT)),
) -> CartItemIdResponse:
    command = AddToCart(
        buyer_id=actor.id,
        product_id=body.product_id,
        quantity=body.quantity,
        size=body.size,
        variation_name=body.variation_name,
        variation_value=body.variation_value,
        price=body.price,
    )
    result = current_domain.process(command, asynchronous=False)
    return CartItemIdResponse(item_id=result)


@cart_router.put("/items/{item_id}")
async def update_cart_item(
    item_id: str,
    body: UpdateCartItemRequest,
    actor: Actor = Depends(require_role(Role.CLIENT)),
) -> JSONResponse:
    command = UpdateCartQuantity(buyer_id=actor.id, item_id=item_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return _cart_response(actor.id, "Cart updated")


@cart_router.delete("/items/{item_id}")
async def remove_cart_item(item_id: str, actor: Actor = Depends(require_role(Role.CLIENT))) -> JSONResponse:
    current_domain.process(RemoveFromCart(buyer_id=actor.id, item_id=item_id), asynchronous=False)
    return _cart_response(actor.id, "Item removed from cart")


@cart_router.delete("", response_model=StatusResponse)
async def clear_cart(actor: Actor = Depends(require_role(Role.CLIENT))) -> StatusResponse:
    current_domain.process(ClearCart(buyer_id=actor.id), asynchronous=False)
    return StatusResponse()
