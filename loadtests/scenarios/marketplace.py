"""Marketplace load test scenarios.

Two stateful SequentialTaskSet journeys (a seller managing listings, a
buyer going from checkout through delivery and review) and a contention
user whose buyers all race for the last units of one product.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, constant_pacing, task

from loadtests.data_generators import (
    actor_headers,
    buyer_id,
    message_data,
    order_data,
    order_line,
    product_data,
    review_data,
    seller_id,
)
from loadtests.helpers.response import extract_error_detail, is_stock_refusal
from loadtests.helpers.state import BuyerState, SellerState

ADMIN = actor_headers("admin-lt-001", "admin")


class SellerListingJourney(SequentialTaskSet):
    """List Product -> Approve -> Restock -> Edit -> Review Own Orders.

    Generates events: ProductCreated, ProductModerated, ProductUpdated (x2).
    """

    def on_start(self):
        self.state = SellerState(seller_id=seller_id())
        self.headers = actor_headers(self.state.seller_id, "seller")

    @task
    def list_product(self):
        with self.client.post(
            "/products",
            json=self._payload(),
            headers=self.headers,
            catch_response=True,
            name="POST /products",
        ) as resp:
            if resp.status_code == 201:
                self.state.product_ids.append(resp.json()["product_id"])
            else:
                resp.failure(f"List product failed: {resp.status_code} - {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def approve_product(self):
        with self.client.patch(
            f"/admin/products/{self.state.product_ids[-1]}/moderate",
            json={"status": "approved"},
            headers=ADMIN,
            catch_response=True,
            name="PATCH /admin/products/{id}/moderate",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Approve failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def restock(self):
        with self.client.put(
            f"/products/{self.state.product_ids[-1]}/stock",
            json={"size": random.choice(self.sizes), "quantity": random.randint(1, 20)},
            headers=self.headers,
            catch_response=True,
            name="PUT /products/{id}/stock",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Restock failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def edit_price(self):
        with self.client.put(
            f"/products/{self.state.product_ids[-1]}",
            json={"price": round(random.uniform(80.0, 2500.0), 2)},
            headers=self.headers,
            catch_response=True,
            name="PUT /products/{id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Edit failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def view_orders(self):
        self.client.get("/seller/orders", headers=self.headers, name="GET /seller/orders")

    @task
    def done(self):
        self.interrupt()

    def _payload(self):
        payload = product_data(sized=True)
        self.sizes = [entry["size"] for entry in payload["size_stock"]]
        return payload


class BuyerCheckoutJourney(SequentialTaskSet):
    """Browse -> Place Order -> Message Seller -> Ship -> Confirm Delivery -> Review.

    A seller lists a fresh product first so the buyer never competes for
    stock with other users.
    Generates events: ProductCreated, OrderPlaced, StockSold, MessageSent (x2),
    OrderStatusUpdated (x2), ReviewSubmitted, ProductRatingUpdated.
    """

    def on_start(self):
        self.state = BuyerState(buyer_id=buyer_id(), seller_id=seller_id())
        self.headers = actor_headers(self.state.buyer_id, "client")
        self.seller_headers = actor_headers(self.state.seller_id, "seller")

    @task
    def seller_lists_product(self):
        payload = product_data(sized=True)
        with self.client.post(
            "/products",
            json=payload,
            headers=self.seller_headers,
            catch_response=True,
            name="POST /products",
        ) as resp:
            if resp.status_code == 201:
                self.state.product_id = resp.json()["product_id"]
                self.state.size = payload["size_stock"][0]["size"]
            else:
                resp.failure(f"List product failed: {resp.status_code} - {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def browse(self):
        self.client.get("/products", params={"sort": "newest"}, name="GET /products")

    @task
    def place_order(self):
        with self.client.post(
            "/orders",
            json=order_data([order_line(self.state.product_id, size=self.state.size, quantity=1)]),
            headers=self.headers,
            catch_response=True,
            name="POST /orders",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_id = resp.json()["order"]["id"]
            else:
                resp.failure(f"Place order failed: {resp.status_code} - {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def message_seller(self):
        self.client.post(
            "/messages/send",
            json=message_data(self.state.seller_id, self.state.product_id),
            headers=self.headers,
            name="POST /messages/send",
        )

    @task
    def ship(self):
        self._set_status("out for delivery", self.seller_headers)

    @task
    def confirm_delivery(self):
        self._set_status("delivered", self.headers)

    @task
    def review(self):
        with self.client.post(
            "/reviews",
            json=review_data(self.state.order_id, self.state.product_id),
            headers=self.headers,
            catch_response=True,
            name="POST /reviews",
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Review failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()

    def _set_status(self, status, headers):
        with self.client.put(
            f"/orders/{self.state.order_id}/status",
            json={"status": status},
            headers=headers,
            catch_response=True,
            name="PUT /orders/{id}/status",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = status
            else:
                resp.failure(f"Set status {status} failed: {resp.status_code} - {extract_error_detail(resp)}")
                self.interrupt()


class SellerUser(HttpUser):
    tasks = [SellerListingJourney]
    wait_time = between(1, 3)


class BuyerUser(HttpUser):
    tasks = [BuyerCheckoutJourney]
    wait_time = between(1, 3)


class StockContentionUser(HttpUser):
    """Many buyers racing for the same few units.

    The first user to start lists one unsized product with limited stock
    and every user buys from it. Refusals for insufficient stock (400) and
    lock timeouts (409) are the expected outcome once it sells out; the
    stock must never go negative.
    """

    wait_time = constant_pacing(0.2)
    product_id = None

    def on_start(self):
        if StockContentionUser.product_id:
            return
        resp = self.client.post(
            "/products",
            json=product_data(sized=False, stock=20),
            headers=actor_headers(seller_id(), "seller"),
            name="[CONTENTION] POST /products",
        )
        if resp.status_code == 201:
            StockContentionUser.product_id = resp.json()["product_id"]

    @task
    def buy_last_units(self):
        if not self.product_id:
            return
        with self.client.post(
            "/orders",
            json=order_data([order_line(self.product_id, quantity=1)]),
            headers=actor_headers(buyer_id(), "client"),
            catch_response=True,
            name="[CONTENTION] POST /orders",
        ) as resp:
            if resp.status_code == 201 or is_stock_refusal(resp):
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code} - {extract_error_detail(resp)}")
