from .auth import User, SessionToken, OneTimeCode
from .catalog import Product
from .customers import Customer
from .settings import CompanySettings
from .invoices import Invoice

__all__ = [
    'User', 'SessionToken', 'OneTimeCode',
    'Product',
    'Customer',
    'CompanySettings',
    'Invoice',
]
