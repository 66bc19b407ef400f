from .inventory import Product, StockLevel
from .sales import Sale, CashEntry, MomoEntry
from .ledger import Withdrawal
from .customers import Customer

__all__ = [
    'Product', 'StockLevel',
    'Sale', 'CashEntry', 'MomoEntry',
    'Withdrawal',
    'Customer',
]
