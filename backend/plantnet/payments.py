from typing import Protocol

import requests

from .errors import PaymentProviderError

STRIPE_API_BASE = "https://api.stripe.com"


class PaymentGateway(Protocol):
    def create_intent(self, amount: int) -> str:
        ...


class StripePayments:
    """Creates Stripe payment intents through the REST API."""

    def __init__(self, secret_key: str, currency: str = "usd", base_url: str = STRIPE_API_BASE):
        self.secret_key = secret_key
        self.currency = currency
        self.base_url = base_url.rstrip("/")

    def create_intent(self, amount: int) -> str:
        """Create an intent for ``amount`` in the smallest currency unit and return its client secret."""
        if not self.secret_key:
            raise PaymentProviderError("Payment configuration is incomplete.")

        try:
            response = requests.post(
                f"{self.base_url}/v1/payment_intents",
                data={
                    "amount": amount,
                    "currency": self.currency,
                    "automatic_payment_methods[enabled]": "true",
                },
                auth=(self.secret_key, ""),
            )
        except requests.RequestException as exc:
            raise PaymentProviderError(f"Payment provider unreachable: {exc}") from exc

        if response.status_code != 200:
            raise PaymentProviderError(
                f"Payment intent creation failed ({response.status_code}): {response.text}"
            )

        client_secret = response.json().get("client_secret")
        if not client_secret:
            raise PaymentProviderError("Payment provider returned no client secret.")
        return client_secret
