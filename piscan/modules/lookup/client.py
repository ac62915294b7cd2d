"""HTTP client for the vendor catalog lookup service.

The service answers ``GET <url>?barcode=<barcode>`` with a JSON array of
products::

    [{"sku": "B000123", "desc": "Widget", "type": "Toy", "vnd": "AMZN:us"}]

``vnd`` is ``source:locale``; ``desc`` and ``type`` may be missing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

import requests
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

log = logging.getLogger(__name__)

USER_AGENT = "PiScan/1.0"


class VendorLookupError(Exception):
    """The vendor catalog could not be queried."""


class VendorResponseError(VendorLookupError):
    """The vendor answered with something that is not a product list."""


@dataclass
class VendorProduct:
    sku: str
    vendor: str
    product_name: str = ""
    product_type: str = ""

    @property
    def source(self) -> str:
        return self.vendor.split(":", 1)[0]

    def locale(self, default: str) -> str:
        parts = self.vendor.split(":", 1)
        if len(parts) == 2 and parts[1].strip():
            return parts[1].strip()
        return default

    @classmethod
    def from_json(cls, entry: Any) -> "VendorProduct":
        if not isinstance(entry, dict):
            raise VendorResponseError(f"Expected a product object, got {type(entry).__name__}")
        sku = entry.get("sku")
        vendor = entry.get("vnd")
        if not sku or not vendor:
            raise VendorResponseError(f"Product entry is missing sku or vnd: {entry!r}")
        return cls(
            sku=str(sku),
            vendor=str(vendor),
            product_name=str(entry.get("desc") or ""),
            product_type=str(entry.get("type") or ""),
        )


def parse_products(payload: Any) -> List[VendorProduct]:
    """Parse a whole vendor response; one bad entry rejects the batch."""
    if not isinstance(payload, list):
        raise VendorResponseError(f"Expected a JSON array, got {type(payload).__name__}")
    return [VendorProduct.from_json(entry) for entry in payload]


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return True
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        status = exc.response.status_code
        return status == 429 or status >= 500
    return False


class VendorClient:
    def __init__(
        self,
        url: str,
        *,
        api_key: str = "",
        timeout: float = 10.0,
        max_attempts: int = 3,
        backoff: float = 1.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)
        self.backoff = backoff
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": USER_AGENT})
        if api_key:
            self.session.headers.update({"X-Api-Key": api_key})

    @classmethod
    def from_config(cls, config) -> "VendorClient":
        return cls(
            config["VENDOR_API_URL"],
            api_key=config.get("VENDOR_API_KEY", ""),
            timeout=config.get("VENDOR_TIMEOUT", 10.0),
            max_attempts=config.get("VENDOR_MAX_ATTEMPTS", 3),
            backoff=config.get("VENDOR_BACKOFF", 1.0),
        )

    def _fetch(self, barcode: str) -> Any:
        r = self.session.get(self.url, params={"barcode": barcode}, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def lookup(self, barcode: str) -> List[VendorProduct]:
        retrying = Retrying(
            retry=retry_if_exception(_is_transient),
            wait=wait_exponential_jitter(initial=self.backoff, max=30, jitter=self.backoff),
            stop=stop_after_attempt(self.max_attempts),
            before_sleep=before_sleep_log(log, logging.WARNING),
            reraise=True,
        )
        try:
            payload = retrying(self._fetch, barcode)
        except ValueError as exc:
            # requests.JSONDecodeError is also a RequestException, so this comes first
            raise VendorResponseError(f"Vendor returned invalid JSON for {barcode}") from exc
        except requests.RequestException as exc:
            raise VendorLookupError(f"Vendor lookup for {barcode} failed: {exc}") from exc
        return parse_products(payload)
