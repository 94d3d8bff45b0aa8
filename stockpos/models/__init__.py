from stockpos.models.users import User
from stockpos.models.category import Category
from stockpos.models.product import Product
from stockpos.models.sale import Sale, SaleItem
from stockpos.models.stock import StockMovement
from stockpos.models.validation import Validation
from stockpos.models.store_settings import StoreSettings
from stockpos.models.log import Log

__all__ = [
    "User", "Category", "Product", "Sale", "SaleItem",
    "StockMovement", "Validation", "StoreSettings", "Log",
]
