"""Storefront load test scenarios.

Two stateful SequentialTaskSet journeys: a customer going from an empty
cart through checkout and back from the gateway, and an administrator
working the order dashboard.

Assumes the server runs with the fake gateway (no
``STOREFRONT_GATEWAY_BASE_URL``), whose payment URL carries the
transaction id the success page is called with.
"""

import random
from urllib.parse import parse_qs, urlparse

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import cart_item_data, checkout_data, search_term, session_id
from loadtests.helpers.response import describe_failure, is_transition_conflict
from loadtests.helpers.state import AdminState, CheckoutState


class CheckoutJourney(SequentialTaskSet):
    """Add Items -> Update Quantity -> Checkout -> Return from Gateway -> Clear Cart.

    Generates events: CartItemAdded (x2), CartQuantityUpdated, OrderPlaced,
    OrderStatusChanged, OrderPaymentRecorded, CartCleared.
    """

    def on_start(self):
        self.state = CheckoutState(session_id=session_id())

    @task
    def add_item_1(self):
        with self.client.post(
            f"/carts/{self.state.session_id}/items",
            json=cart_item_data("netflix-premium"),
            catch_response=True,
            name="POST /carts/{id}/items",
        ) as resp:
            if resp.status_code == 200:
                self.state.item_count = resp.json()["item_count"]
            else:
                resp.failure(f"Add cart item failed: {resp.status_code}: {describe_failure(resp)}")
                self.interrupt()

    @task
    def add_item_2(self):
        with self.client.post(
            f"/carts/{self.state.session_id}/items",
            json=cart_item_data(),
            catch_response=True,
            name="POST /carts/{id}/items",
        ) as resp:
            if resp.status_code == 200:
                self.state.item_count = resp.json()["item_count"]
            else:
                resp.failure(f"Add cart item 2 failed: {resp.status_code}: {describe_failure(resp)}")

    @task
    def update_quantity(self):
        with self.client.put(
            f"/carts/{self.state.session_id}/items/netflix-premium",
            json={"quantity": random.randint(1, 4)},
            catch_response=True,
            name="PUT /carts/{id}/items/{product_id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Update quantity failed: {resp.status_code}: {describe_failure(resp)}")

    @task
    def checkout(self):
        with self.client.post(
            "/checkout",
            json=checkout_data(self.state.session_id),
            catch_response=True,
            name="POST /checkout",
        ) as resp:
            if resp.status_code == 201:
                body = resp.json()
                self.state.order_id = body["order_id"]
                query = parse_qs(urlparse(body["payment_url"]).query)
                self.state.transaction_id = (query.get("transactionID") or [None])[0]
            else:
                resp.failure(f"Checkout failed: {resp.status_code}: {describe_failure(resp)}")
                self.interrupt()

    @task
    def return_from_gateway(self):
        if not self.state.transaction_id:
            self.interrupt()
        with self.client.get(
            "/payments/success",
            params={"transactionID": self.state.transaction_id},
            catch_response=True,
            name="GET /payments/success",
        ) as resp:
            if resp.status_code == 200 and resp.json()["verified"]:
                self.state.current_status = resp.json()["order_status"]
            else:
                resp.failure(f"Payment verification failed: {resp.status_code}: {describe_failure(resp)}")

    @task
    def clear_cart(self):
        with self.client.delete(
            f"/carts/{self.state.session_id}",
            catch_response=True,
            name="DELETE /carts/{id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Clear cart failed: {resp.status_code}: {describe_failure(resp)}")
        self.interrupt()


class AdminDashboardJourney(SequentialTaskSet):
    """List -> Search -> Open -> Process or Cancel -> Add Notes.

    Conflicts (409) are expected when a customer's payment lands on an order
    the administrator is moving, and are not counted as failures.
    """

    def on_start(self):
        self.state = AdminState()
        self.order_id = None

    @task
    def list_pending(self):
        with self.client.get(
            "/admin/orders",
            params={"status": "pending"},
            catch_response=True,
            name="GET /admin/orders?status=",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"List orders failed: {resp.status_code}: {describe_failure(resp)}")
                self.interrupt()
            orders = resp.json()
            if orders:
                self.order_id = random.choice(orders[:20])["id"]
                self.state.seen_order_ids.append(self.order_id)

    @task
    def search(self):
        with self.client.get(
            "/admin/orders",
            params={"q": search_term()},
            catch_response=True,
            name="GET /admin/orders?q=",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Search failed: {resp.status_code}: {describe_failure(resp)}")

    @task
    def act_on_order(self):
        if not self.order_id:
            self.interrupt()
        action = random.choice(["process", "cancel"])
        with self.client.put(
            f"/admin/orders/{self.order_id}/{action}",
            catch_response=True,
            name=f"PUT /admin/orders/{{id}}/{action}",
        ) as resp:
            if is_transition_conflict(resp):
                resp.success()
            elif resp.status_code != 200:
                resp.failure(f"{action} failed: {resp.status_code}: {describe_failure(resp)}")

    @task
    def add_notes(self):
        with self.client.put(
            f"/admin/orders/{self.order_id}",
            json={"notes": "Checked by load test"},
            catch_response=True,
            name="PUT /admin/orders/{id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Update failed: {resp.status_code}: {describe_failure(resp)}")
        self.interrupt()


class CustomerUser(HttpUser):
    tasks = [CheckoutJourney]
    wait_time = between(1, 3)
    weight = 9


class AdminUser(HttpUser):
    tasks = [AdminDashboardJourney]
    wait_time = between(2, 5)
    weight = 1
