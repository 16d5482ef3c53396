from .auth import Account, Employee, SessionToken
from .catalog import Category, Product
from .sales import Transaction, TransactionItem

__all__ = [
    'Account', 'Employee', 'SessionToken',
    'Category', 'Product',
    'Transaction', 'TransactionItem',
]
