"""Custom exceptions for the distributor ordering backend."""

# Order id reported to callers when an order is rejected for availability
UNAVAILABLE_ORDER_ID = 0


class AppError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['code'] = self.status_code
        rv['message'] = self.message
        return rv

class BusinessLogicError(AppError):
    """Exception raised for business logic violations."""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)

class NotFoundError(AppError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)

class AuthenticationError(AppError):
    """Raised when the bearer token is missing or invalid."""
    def __init__(self, message="Invalid token", status_code=401):
        super().__init__(message, status_code)

class UnauthorizedError(AppError):
    """Raised when a user lacks permission for an action."""
    def __init__(self, message="Unauthorized access"):
        super().__init__(message, 403)


class OrderUnavailableError(BusinessLogicError):
    """
    Order rejected because what it asks for cannot be supplied.

    Expected outcome, not a system fault: the reservation transaction has
    already been rolled back and callers receive the sentinel order id.
    """
    order_id = UNAVAILABLE_ORDER_ID

    def __init__(self, message="We're sorry, the products you requested are not available!", payload=None):
        payload = dict(payload or ())
        payload['data'] = UNAVAILABLE_ORDER_ID
        super().__init__(message, status_code=400, payload=payload)

class InsufficientStockError(OrderUnavailableError):
    """Raised when one or more lines ask for more than the remaining quantity."""
    def __init__(self, shortfalls):
        self.shortfalls = list(shortfalls)
        super().__init__(payload={
            'shortfalls': [
                {'price_id': s['price_id'], 'requested': s['requested'], 'available': s['available']}
                for s in self.shortfalls
            ]
        })

class ListingUnavailableError(OrderUnavailableError):
    """Raised when a priced listing does not exist or was soft-deleted."""
    def __init__(self, price_ids):
        self.price_ids = sorted(price_ids)
        super().__init__(payload={'unavailable_price_ids': self.price_ids})

class ShopUnavailableError(OrderUnavailableError):
    """Raised when the ordering shop does not exist or was soft-deleted."""
    def __init__(self, shop_id):
        self.shop_id = shop_id
        super().__init__(payload={'shop_id': shop_id})


class DiscountLookupError(AppError):
    """Raised when the active discount of a listing could not be determined."""
    def __init__(self, price_id):
        self.price_id = price_id
        super().__init__(f"Discount lookup failed for price {price_id}", 500)

class OrderPlacementError(AppError):
    """Unexpected failure while placing an order. Nothing was persisted."""
    def __init__(self, message="Error adding order to database!"):
        super().__init__(message, 500)
