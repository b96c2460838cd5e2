"""Shipping and tax rules applied to one vendor's share of a cart."""

from typing import Protocol

from config.settings import settings
from src.bm_common.money import calculate_bps


class RateRulesProtocol(Protocol):
    def shipping(self, subtotal: int) -> int: ...

    def tax(self, subtotal: int) -> int: ...


class FlatRateRules:
    """Flat shipping fee per vendor order, basis-point tax on the subtotal.

    free_shipping_threshold == 0 disables free shipping.
    """

    def __init__(self, flat_fee: int, free_shipping_threshold: int = 0, tax_rate_bps: int = 0) -> None:
        if flat_fee < 0 or free_shipping_threshold < 0 or tax_rate_bps < 0:
            raise ValueError("Rate rule values must be non-negative")
        self.flat_fee = flat_fee
        self.free_shipping_threshold = free_shipping_threshold
        self.tax_rate_bps = tax_rate_bps

    @classmethod
    def from_settings(cls) -> "FlatRateRules":
        return cls(
            flat_fee=settings.SHIPPING_FLAT_FEE,
            free_shipping_threshold=settings.FREE_SHIPPING_THRESHOLD,
            tax_rate_bps=settings.TAX_RATE_BPS,
        )

    def shipping(self, subtotal: int) -> int:
        if self.free_shipping_threshold and subtotal >= self.free_shipping_threshold:
            return 0
        return self.flat_fee

    def tax(self, subtotal: int) -> int:
        return calculate_bps(subtotal, self.tax_rate_bps)
