from enum import Enum

class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FLAT = "flat"

class ContractKind(str, Enum):
    AMC = "amc"
    RENTAL = "rental"

class ContractStatus(str, Enum):
    ACTIVE = "Active"
    EXPIRING_SOON = "ExpiringSoon"
    EXPIRED = "Expired"

class PaymentStatus(str, Enum):
    PENDING = "Pending"
    PAID = "Paid"
    DUE = "Due"
    OVERDUE = "Overdue"
