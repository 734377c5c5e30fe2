"""Enumeration types for gateway data models."""

from enum import Enum


class ProviderEnvironment(str, Enum):
    """Payment provider environment a tenant is bound to."""

    DEMO = "demo"
    PRODUCTION = "production"


class CanonicalEventType(str, Enum):
    """Provider-agnostic event types delivered to tenant endpoints."""

    ORDER_CREATED = "order.created"
    PAYMENT_SUCCESS = "payment.success"
    PAYMENT_FAILED = "payment.failed"
    PAYMENT_REFUNDED = "payment.refunded"


class ProviderEventType(int, Enum):
    """Provider webhook EventTypeId codes handled by the relay."""

    TRANSACTION_PAYMENT_CREATED = 1796
    TRANSACTION_REVERSAL_CREATED = 1797
    TRANSACTION_FAILED = 1798


class TransactionStatus(str, Enum):
    """Provider transaction StatusId values."""

    SUCCESS = "F"
    ERROR = "E"
    PENDING = "A"
    REFUNDED = "R"
    CANCELED = "X"
    DISPUTED = "D"
    UNSETTLED = "M"
    TIMEOUT = "MA"
    INCOMPLETE_CARD = "MI"
    INCOMPLETE_3DS = "MW"
