"""
Domain exceptions raised by services and mapped to HTTP errors by the API layer
"""


class NotFoundError(LookupError):
    """Requested record does not exist"""

    def __init__(self, entity: str, identifier):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} {identifier} not found")


class DuplicateError(ValueError):
    """Unique field already taken (sku, slug, discount code, e-mail)"""


class DiscountCodeError(ValueError):
    """Discount code cannot be applied"""

    def __init__(self, code: str, reason: str):
        self.code = code
        self.reason = reason
        super().__init__(f"Discount code '{code}' {reason}")
