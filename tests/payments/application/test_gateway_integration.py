"""Tests for gateway port/adapter integration."""

import ordering.config
from ordering.config import StoreSettings
from payments.gateway import get_gateway, reset_gateway, set_gateway
from payments.gateway.fake_adapter import FakeGateway
from payments.gateway.http_adapter import HttpPaymentGateway
from payments.gateway.port import ChargeLine, ChargeRequest, ChargeResult, VerifyResult


def _request(order_id="ORD-00000001", total="20.00", currency="USD"):
    return ChargeRequest(
        order_id=order_id,
        customer_name="Nadia Rahman",
        customer_email="nadia@example.com",
        customer_phone="+8801700000000",
        total_amount=total,
        currency=currency,
        items=(ChargeLine(product_id="netflix", name="Netflix Premium", quantity=2, price=10.0, duration="1 month"),),
    )


class TestFakeGateway:
    def test_default_charge_succeeds(self):
        gateway = FakeGateway()
        result = gateway.create_charge(_request())
        assert isinstance(result, ChargeResult)
        assert result.success is True
        assert "transactionID=fake_txn_" in result.payment_url

    def test_configured_charge_fails(self):
        gateway = FakeGateway()
        gateway.configure(should_succeed=False, failure_reason="Merchant suspended")
        result = gateway.create_charge(_request())
        assert result.success is False
        assert result.error == "Merchant suspended"
        assert gateway.last_transaction_id is None

    def test_verify_echoes_order_metadata(self):
        gateway = FakeGateway()
        gateway.create_charge(_request(order_id="ORD-00000042", total="2200", currency="BDT"))

        result = gateway.verify_charge(gateway.last_transaction_id)

        assert isinstance(result, VerifyResult)
        assert result.success is True
        assert result.data.is_completed
        assert result.data.order_id == "ORD-00000042"
        assert result.data.amount == "2200"
        assert result.data.currency == "BDT"
        assert result.data.meta_data["items"][0]["productId"] == "netflix"

    def test_verify_unknown_transaction(self):
        result = FakeGateway().verify_charge("fake_txn_missing")
        assert result.success is False

    def test_configured_verify_status(self):
        gateway = FakeGateway()
        gateway.create_charge(_request())
        gateway.configure(verify_status="FAILED")
        result = gateway.verify_charge(gateway.last_transaction_id)
        assert result.success is True
        assert not result.data.is_completed

    def test_call_logging(self):
        gateway = FakeGateway()
        gateway.create_charge(_request())
        gateway.verify_charge(gateway.last_transaction_id)
        assert [call["method"] for call in gateway.calls] == ["create_charge", "verify_charge"]
        assert gateway.calls[0]["request"].order_id == "ORD-00000001"


class TestChargeRequestPayload:
    def test_payload_shape(self):
        payload = _request().to_payload()
        assert payload["orderId"] == "ORD-00000001"
        assert payload["totalAmount"] == "20.00"
        assert payload["items"][0] == {
            "productId": "netflix",
            "name": "Netflix Premium",
            "quantity": 2,
            "price": 10.0,
            "duration": "1 month",
        }
        assert "successUrl" not in payload


class TestGatewayFactory:
    def test_get_gateway_returns_fake_by_default(self, monkeypatch):
        monkeypatch.setattr(ordering.config, "get_settings", lambda: StoreSettings(_env_file=None))
        reset_gateway()
        assert isinstance(get_gateway(), FakeGateway)

    def test_http_gateway_when_base_url_configured(self, monkeypatch):
        settings = StoreSettings(_env_file=None, gateway_base_url="https://gateway.test/api", gateway_api_key="k")
        monkeypatch.setattr(ordering.config, "get_settings", lambda: settings)
        reset_gateway()
        assert isinstance(get_gateway(), HttpPaymentGateway)

    def test_set_gateway_overrides(self):
        custom = FakeGateway()
        set_gateway(custom)
        assert get_gateway() is custom

    def test_reset_gateway(self):
        set_gateway(FakeGateway())
        reset_gateway()
        assert get_gateway() is not None
