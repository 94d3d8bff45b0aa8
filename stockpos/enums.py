# stockpos/enums.py
import enum


class Role(str, enum.Enum):
    ADMIN = "admin"
    STOCK_MANAGER = "stock_manager"
    CASHIER = "cashier"


class UserStatus(str, enum.Enum):
    ACTIVE = "active"
    DISABLED = "disabled"


# Lifecycle of categories and products
class CatalogStatus(str, enum.Enum):
    ACTIVE = "active"
    PENDING_DELETION = "pending_deletion"
    DELETED = "deleted"


class SaleStatus(str, enum.Enum):
    VALID = "valid"
    PENDING_DELETION = "pending_deletion"
    DELETED = "deleted"


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CARD = "card"
    MOBILE_MONEY = "mobile_money"


class MovementType(str, enum.Enum):
    IN = "in"
    OUT = "out"
    RETURN = "return"
    LOSS = "loss"


# Entity kinds a permission or a validation request can refer to
class EntityType(str, enum.Enum):
    USER = "user"
    CATEGORY = "category"
    PRODUCT = "product"
    SALE = "sale"
    STOCK_MOVEMENT = "stock_movement"
    VALIDATION = "validation"


class ValidationAction(str, enum.Enum):
    DELETION = "deletion"
    RESTORATION = "restoration"


class ValidationStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Decision(str, enum.Enum):
    APPROVE = "approve"
    REJECT = "reject"
