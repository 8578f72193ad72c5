"""
E-confiance.fr review certification API.

Companies, orders, product orders and product reviews. Authentication is an
API Platform JWT login on ``/login_check`` with the company slug as login.
"""

from __future__ import annotations

from typing import Any, Optional

from apiplatform_sdk.clients import ApiPlatformClient
from apiplatform_sdk.core.config import EconfianceSettings
from apiplatform_sdk.models import ApiResponse, AuthMethod, ProviderConfig, QueryString

REVIEW_STATUS_PUBLISHED = "/api/review_statuses/1"
REVIEW_STATUS_PENDING = "/api/review_statuses/2"


def build_config(
    settings: EconfianceSettings,
    *,
    verify_tls: bool = True,
    timeout_seconds: float = 30.0,
) -> ProviderConfig:
    return ProviderConfig(
        name="econfiance",
        base_url=settings.api_url,
        format="jsonld",
        concat_format=False,
        has_authentication=True,
        auth_method=AuthMethod.JWT,
        auth_uri="login_check",
        login=settings.login,
        password=settings.password,
        token_lifetime_minutes=settings.token_lifetime_minutes,
        verify_tls=verify_tls,
        timeout_seconds=timeout_seconds,
    )


def _require(value: Any, name: str) -> None:
    if value in (None, "", 0):
        raise ValueError(f"{name} is required.")


class EconfianceClient:
    """Endpoint helpers for e-confiance.fr."""

    def __init__(self, api: ApiPlatformClient, settings: EconfianceSettings) -> None:
        self._api = api
        self._settings = settings

    @property
    def api(self) -> ApiPlatformClient:
        return self._api

    def _company_iri(self) -> str:
        _require(self._settings.company_id, "Company ID")
        return f"/api/companies/{self._settings.company_id}"

    # ------------- Companies -------------

    def get_companies(self, page: int = 1) -> ApiResponse:
        return self._api.get("companies", QueryString().with_page(page))

    def get_company(self, company_id: Optional[int] = None) -> ApiResponse:
        """Fetch a company, defaulting to the configured one."""
        company_id = company_id or self._settings.company_id
        _require(company_id, "Company ID")
        return self._api.get_single("companies", company_id)

    def get_company_global_rating(self, company_id: int) -> ApiResponse:
        _require(company_id, "Company ID")
        return self._api.get_single("companies/global-rating", company_id)

    # ------------- Orders -------------

    def get_order(self, order_id: int) -> ApiResponse:
        _require(order_id, "Order ID")
        return self._api.get_single("orders", order_id)

    def create_order(
        self,
        order_number: str,
        customer_email: str,
        *,
        firstname: Optional[str] = None,
        lastname: Optional[str] = None,
        mail_sent: bool = True,
        customer_phone: Optional[str] = None,
    ) -> ApiResponse:
        """Register an order. ``mail_sent=True`` stops e-confiance emailing the customer."""
        _require(order_number, "Order number")
        _require(customer_email, "Customer email")
        return self._api.post(
            "orders",
            {
                "orderNumber": order_number,
                "customerEmail": customer_email,
                "firstname": firstname,
                "lastname": lastname,
                "mailSent": mail_sent,
                "customerPhone": customer_phone,
            },
        )

    # ------------- Product orders -------------

    def get_product_order(self, product_order_id: int) -> ApiResponse:
        _require(product_order_id, "Product order ID")
        return self._api.get_single("product_orders", product_order_id)

    def create_product_order(
        self,
        order_id: int,
        product_name: str,
        product_reference: str,
        *,
        product_image_url: str = "",
        product_link: str = "",
        free_field: str = "",
        follow_up: int = 0,
    ) -> ApiResponse:
        """Attach a product to an order returned by :meth:`create_order`."""
        _require(order_id, "Order ID")
        return self._api.post(
            "product_orders",
            {
                "orderParent": f"/api/orders/{order_id}",
                "name": product_name,
                "reference": product_reference,
                "freeField": free_field,
                "image": product_image_url,
                "followUp": follow_up,
                "link": product_link,
            },
        )

    # ------------- Product reviews -------------

    def get_product_reviews(self, page: int = 1) -> ApiResponse:
        return self._api.get("product_reviews", QueryString().with_page(page))

    def get_product_review(self, review_id: int) -> ApiResponse:
        _require(review_id, "Product review ID")
        return self._api.get_single("product_reviews", review_id)

    def get_product_review_average(self, reference: str) -> ApiResponse:
        _require(reference, "Product reference")
        return self._api.get_single(
            "product_reviews/average", f"{self._api.config.login}/{reference}"
        )

    def create_product_review(
        self,
        order_id: int,
        product_name: str,
        review_content: str,
        review_rating: int,
        customer_ip: str,
        *,
        review_status: str = "pending",
        product_reference: Optional[str] = None,
        product_image_url: Optional[str] = None,
        product_link: Optional[str] = None,
        browser_user_agent: Optional[str] = None,
        free_field: Optional[str] = None,
    ) -> ApiResponse:
        """Create a review for an existing order.

        ``review_status`` is ``"published"`` or ``"pending"`` (awaiting moderation).
        """
        _require(order_id, "Order ID")
        status_iri = (
            REVIEW_STATUS_PUBLISHED if review_status == "published" else REVIEW_STATUS_PENDING
        )
        return self._api.post(
            "product_reviews",
            {
                "orderParent": f"/api/orders/{order_id}",
                "productName": product_name,
                "reference": product_reference,
                "freeField": free_field,
                "image": product_image_url,
                "link": product_link,
                "content": review_content,
                "rating": int(review_rating),
                "status": status_iri,
                "browser": [browser_user_agent],
                "customerIp": customer_ip,
                "company": self._company_iri(),
            },
        )


__all__ = ["EconfianceClient", "build_config"]
