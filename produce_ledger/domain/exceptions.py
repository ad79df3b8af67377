"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidCategoryError(DomainException):
    """Shipment size is not one of the known tiers"""

    pass


class InvalidInputError(DomainException):
    """Amount or quantity is missing, non-numeric or not positive"""

    pass


class InsufficientFundsError(DomainException):
    """Withdrawal exceeds the balance available for withdrawal"""

    pass


class NotFoundError(DomainException):
    """No savings account exists for the producer"""

    pass


class DuplicateDepositError(DomainException):
    """A deposit for this order is already on the producer's ledger"""

    def __init__(self, producer_id: str, order_id: str):
        super().__init__(f"Deposit for order {order_id} already recorded for producer {producer_id}")
        self.producer_id = producer_id
        self.order_id = order_id


class FinancePartnerError(DomainException):
    """Finance partner API returned an error or is unavailable"""

    pass


class DuplicateSettlementError(DomainException):
    """The order has already been settled"""

    pass
