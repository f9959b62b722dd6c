"""HTTP adapter for the hosted payment gateway.

Both calls are JSON POSTs authenticated with an ``X-API-KEY`` header.
Verification is a read, so it is retried with exponential backoff on
transport errors and 5xx responses. Charge creation is never retried: a
timed-out create may still have opened a checkout on the gateway side.
"""

import time

import httpx
import structlog

from payments.gateway.port import (
    ChargeRequest,
    ChargeResult,
    PaymentGateway,
    VerifiedCharge,
    VerifyResult,
)

logger = structlog.get_logger(__name__)


class _RetryableGatewayError(Exception):
    pass


class HttpPaymentGateway(PaymentGateway):
    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 30.0,
        verify_attempts: int = 3,
        backoff_seconds: float = 0.5,
        transport: httpx.BaseTransport | None = None,
        sleep=time.sleep,
    ) -> None:
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["X-API-KEY"] = api_key

        self.verify_attempts = max(1, verify_attempts)
        self.backoff_seconds = backoff_seconds
        self._sleep = sleep
        self._client = httpx.Client(
            base_url=base_url.rstrip("/") + "/",
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def create_charge(self, request: ChargeRequest) -> ChargeResult:
        try:
            response = self._client.post("create-charge", json=request.to_payload())
            body = self._json(response)
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Gateway create-charge failed", order_id=request.order_id, error=str(exc))
            return ChargeResult(success=False, error=f"Gateway request failed: {exc}")

        if response.is_error or not body.get("success") or not body.get("payment_url"):
            error = body.get("error") or f"Gateway returned HTTP {response.status_code}"
            logger.warning("Gateway rejected charge", order_id=request.order_id, error=error)
            return ChargeResult(success=False, error=error)

        return ChargeResult(success=True, payment_url=body["payment_url"])

    def verify_charge(self, transaction_id: str) -> VerifyResult:
        last_error = None
        for attempt in range(1, self.verify_attempts + 1):
            try:
                return self._verify_once(transaction_id)
            except _RetryableGatewayError as exc:
                last_error = str(exc)
                logger.warning(
                    "Gateway verify-charge attempt failed",
                    transaction_id=transaction_id,
                    attempt=attempt,
                    error=last_error,
                )
                if attempt < self.verify_attempts:
                    self._sleep(self.backoff_seconds * 2 ** (attempt - 1))

        return VerifyResult(success=False, error=last_error)

    def _verify_once(self, transaction_id: str) -> VerifyResult:
        try:
            response = self._client.post("verify-charge", json={"transaction_id": transaction_id})
        except httpx.TransportError as exc:
            raise _RetryableGatewayError(f"Gateway request failed: {exc}") from exc

        if response.status_code >= 500:
            raise _RetryableGatewayError(f"Gateway returned HTTP {response.status_code}")

        try:
            body = self._json(response)
        except ValueError:
            return VerifyResult(success=False, error="Gateway returned a malformed response")

        if response.is_error or not body.get("success") or not body.get("data"):
            error = body.get("error") or f"Gateway returned HTTP {response.status_code}"
            return VerifyResult(success=False, error=error)

        return VerifyResult(success=True, data=VerifiedCharge.from_payload(body["data"]))

    @staticmethod
    def _json(response: httpx.Response) -> dict:
        body = response.json()
        if not isinstance(body, dict):
            raise ValueError("Gateway response is not a JSON object")
        return body
