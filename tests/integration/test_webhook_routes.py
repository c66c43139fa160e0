"""Integration tests for Stripe and Astria webhook routes."""

import hashlib
import hmac
import json
import time

from fastapi.testclient import TestClient

WEBHOOK_SECRET = "whsec_test_webhook_secret"


def sign(payload: bytes, secret: str = WEBHOOK_SECRET) -> str:
    """Build a Stripe-Signature header for a payload."""
    timestamp = int(time.time())
    signed = f"{timestamp}.{payload.decode()}".encode()
    signature = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def checkout_completed(session_id: str = "cs_test_webhook", tier: str = "basic") -> bytes:
    event = {
        "id": "evt_test_webhook",
        "object": "event",
        "type": "checkout.session.completed",
        "data": {
            "object": {
                "id": session_id,
                "object": "checkout.session",
                "payment_intent": "pi_test_789",
                "payment_status": "paid",
                "amount_total": 499,
                "customer_email": "buyer@example.com",
                "customer_details": {"email": "buyer@example.com"},
                "metadata": {"tier": tier, "headshot_count": "10"},
            }
        },
    }
    return json.dumps(event).encode()


class TestStripeWebhook:
    """Tests for POST /api/v1/webhooks/stripe."""

    def test_checkout_completed_creates_paid_order(self, client: TestClient, backend) -> None:
        """Test a signed completion creates the order and confirms it."""
        payload = checkout_completed()

        response = client.post(
            "/api/v1/webhooks/stripe",
            content=payload,
            headers={"Stripe-Signature": sign(payload)},
        )

        assert response.status_code == 200
        assert response.json() == {"received": True}
        order = backend.orders.get_by_stripe_session("cs_test_webhook")
        assert order["status"] == "paid"
        assert order["tier"] == "basic"
        assert order["headshot_count"] == 10
        backend.email.send_order_confirmation.assert_awaited_once()

    def test_replayed_event_creates_one_order(self, client: TestClient, backend) -> None:
        """Test redelivery is acknowledged without a second order or email."""
        payload = checkout_completed()

        for _ in range(2):
            response = client.post(
                "/api/v1/webhooks/stripe",
                content=payload,
                headers={"Stripe-Signature": sign(payload)},
            )
            assert response.status_code == 200

        assert len(backend.orders.rows) == 1
        assert backend.email.send_order_confirmation.await_count == 1

    def test_forged_signature_returns_400_without_writes(self, client: TestClient, backend) -> None:
        """Test a payload signed with the wrong secret is rejected."""
        payload = checkout_completed()

        response = client.post(
            "/api/v1/webhooks/stripe",
            content=payload,
            headers={"Stripe-Signature": sign(payload, secret="whsec_attacker")},
        )

        assert response.status_code == 400
        assert backend.orders.rows == {}
        assert backend.orders.writes == 0
        backend.email.send_order_confirmation.assert_not_awaited()

    def test_missing_signature_returns_400(self, client: TestClient, backend) -> None:
        """Test an unsigned request is rejected."""
        response = client.post("/api/v1/webhooks/stripe", content=checkout_completed())

        assert response.status_code == 400
        assert backend.orders.rows == {}

    def test_unhandled_event_is_acknowledged(self, client: TestClient, backend) -> None:
        """Test other event types are accepted and ignored."""
        payload = json.dumps({"id": "evt_other", "object": "event", "type": "charge.refunded", "data": {"object": {}}}).encode()

        response = client.post(
            "/api/v1/webhooks/stripe",
            content=payload,
            headers={"Stripe-Signature": sign(payload)},
        )

        assert response.status_code == 200
        assert backend.orders.rows == {}


class TestAstriaWebhook:
    """Tests for POST /api/v1/webhooks/astria."""

    def _training_order(self, backend, headshot_count: int = 4):
        order = backend.orders.add(status="training", headshot_count=headshot_count)
        job = backend.training_jobs.create(order["id"], status="training")
        backend.training_jobs.update(job["id"], {"astria_tune_id": "4242"})
        return order, job

    def test_tune_completed_starts_generation(self, client: TestClient, backend) -> None:
        """Test a finished tune moves the order to generating and queues prompts."""
        order, job = self._training_order(backend)

        response = client.post(
            "/api/v1/webhooks/astria",
            params={"order_id": order["id"], "training_job_id": job["id"]},
            json={"id": 4242, "type": "tune", "status": "completed"},
        )

        assert response.status_code == 200
        assert backend.orders.get(order["id"])["status"] == "generating"
        assert backend.astria.create_prompt.await_count == 1

    def test_duplicate_tune_callback_queues_prompts_once(self, client: TestClient, backend) -> None:
        """Test callback redelivery."""
        order, job = self._training_order(backend)
        body = {"id": 4242, "type": "tune", "status": "completed"}

        client.post("/api/v1/webhooks/astria", json=body)
        response = client.post("/api/v1/webhooks/astria", json=body)

        assert response.status_code == 200
        assert backend.astria.create_prompt.await_count == 1

    def test_unknown_tune_returns_404(self, client: TestClient) -> None:
        """Test a callback for a tune we never created."""
        response = client.post(
            "/api/v1/webhooks/astria",
            json={"id": 999, "type": "tune", "status": "completed"},
        )

        assert response.status_code == 404

    def test_prompt_callback_completes_order(self, client: TestClient, backend) -> None:
        """Test delivered images are saved and complete the order once."""
        order, job = self._training_order(backend, headshot_count=2)
        backend.orders.compare_and_set_status(order["id"], "training", "generating")
        body = {
            "id": 777,
            "type": "prompt",
            "status": "completed",
            "text": "professional headshot of person",
            "images": ["https://astria.test/1.jpg", "https://astria.test/2.jpg"],
        }

        for _ in range(2):
            response = client.post(
                "/api/v1/webhooks/astria",
                params={"order_id": order["id"], "training_job_id": job["id"]},
                json=body,
            )
            assert response.status_code == 200

        assert backend.images.count_generated(order["id"]) == 2
        assert backend.orders.get(order["id"])["status"] == "completed"
        backend.email.send_headshots_ready.assert_awaited_once()

    def test_prompt_callback_without_order_id_returns_400(self, client: TestClient, backend) -> None:
        """Test prompt callbacks must carry their order."""
        self._training_order(backend)

        response = client.post(
            "/api/v1/webhooks/astria",
            json={"id": 777, "type": "prompt", "status": "completed", "images": ["https://astria.test/1.jpg"]},
        )

        assert response.status_code == 400
        assert backend.images.generated == []

    def test_invalid_payload_returns_422(self, client: TestClient) -> None:
        """Test a body that is not a tune or prompt callback."""
        response = client.post("/api/v1/webhooks/astria", json={"id": 1, "type": "pack", "status": "completed"})

        assert response.status_code == 422
