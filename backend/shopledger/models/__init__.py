from .tenancy import Shop
from .catalog import Item
from .staff import Staff
from .ledger import Transaction, PAYMENT_MODES, PAYMENT_CASH, PAYMENT_UPI, PAYMENT_CREDIT

__all__ = [
    'Shop',
    'Item',
    'Staff',
    'Transaction', 'PAYMENT_MODES', 'PAYMENT_CASH', 'PAYMENT_UPI', 'PAYMENT_CREDIT',
]
