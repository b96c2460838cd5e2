"""Unified error codes and custom exceptions.

Every business-rule failure is an AppError subclass rendered into the
ApiResponse envelope by the exception handler in src/main.py. None of them
are transient, so callers never retry.

Error code ranges:
  1xxx: Auth/User
  2xxx: Wallet
  3xxx: Catalogue/Cart
  4xxx: Order
  5xxx: Escrow/Dispute
  9xxx: System/Validation
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- Error kinds ---

class ValidationError(AppError):
    """Malformed input or a business precondition on the input failed."""

    def __init__(self, message: str, code: int = 9003) -> None:
        super().__init__(code, message, 422)


class NotFoundError(AppError):
    def __init__(self, resource: str, resource_id: str, code: int = 9004) -> None:
        super().__init__(code, f"{resource} not found: {resource_id}", 404)


class InvalidTransitionError(AppError):
    def __init__(self, entity: str, current: str, target: str, code: int = 4002) -> None:
        self.current = current
        self.target = target
        super().__init__(
            code, f"{entity} cannot transition from {current} to {target}", 409
        )


class InsufficientFundsError(AppError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            2001,
            f"Insufficient funds: required {required}, available {available}",
            422,
        )


class AlreadyResolvedError(AppError):
    def __init__(self, entity: str, entity_id: str, status: str) -> None:
        super().__init__(5002, f"{entity} {entity_id} is already {status}", 409)


# --- 1xxx: Auth/User ---

class EmailExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Email already exists", 409)


class PhoneExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Phone number already exists", 409)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid credentials", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", 403)


class InvalidRefreshTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1005, "Refresh token is invalid or expired", 401)


class VendorRequiredError(AppError):
    def __init__(self, detail: str = "Vendor account required") -> None:
        super().__init__(1006, detail, 403)


class AdminRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(1007, "Admin account required", 403)


# --- 2xxx: Wallet ---

class WalletNotFoundError(NotFoundError):
    def __init__(self, wallet_ref: str) -> None:
        super().__init__("Wallet", wallet_ref, 2002)


class PaymentGatewayError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2003, f"Payment gateway rejected the request: {detail}", 422)


# --- 3xxx: Catalogue/Cart ---

class ListingNotFoundError(NotFoundError):
    def __init__(self, listing_id: str) -> None:
        super().__init__("Listing", listing_id, 3001)


class OutOfStockError(ValidationError):
    def __init__(self, listing_id: str, requested: int, available: int) -> None:
        super().__init__(
            f"Listing {listing_id} has {available} in stock, requested {requested}",
            3002,
        )


class EmptyCartError(ValidationError):
    def __init__(self) -> None:
        super().__init__("Cart is empty", 3003)


class ListingInactiveError(ValidationError):
    def __init__(self, listing_id: str) -> None:
        super().__init__(f"Listing {listing_id} is not available", 3004)


class CategoryNotFoundError(NotFoundError):
    def __init__(self, slug: str) -> None:
        super().__init__("Category", slug, 3005)


class WishlistItemNotFoundError(NotFoundError):
    def __init__(self, listing_id: str) -> None:
        super().__init__("Wishlist item", listing_id, 3006)


# --- 4xxx: Order ---

class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: str) -> None:
        super().__init__("Order", order_id, 4001)


class OrderTransitionError(InvalidTransitionError):
    def __init__(self, order_id: str, current: str, target: str) -> None:
        super().__init__(f"Order {order_id}", current, target, 4002)


# --- 5xxx: Escrow/Dispute ---

class DisputeNotFoundError(NotFoundError):
    def __init__(self, dispute_id: str) -> None:
        super().__init__("Dispute", dispute_id, 5001)


class EscrowNotFoundError(NotFoundError):
    def __init__(self, order_id: str) -> None:
        super().__init__("Escrow for order", order_id, 5003)


class EscrowFrozenError(AppError):
    def __init__(self, order_id: str) -> None:
        super().__init__(5004, f"Escrow for order {order_id} is frozen by a dispute", 409)


class DisputeExistsError(AppError):
    def __init__(self, order_id: str) -> None:
        super().__init__(5005, f"A dispute already exists for order {order_id}", 409)


class DisputeTransitionError(InvalidTransitionError):
    def __init__(self, dispute_id: str, current: str, target: str) -> None:
        super().__init__(f"Dispute {dispute_id}", current, target, 5006)


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
