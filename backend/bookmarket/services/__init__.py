# Services package initialization
# This file makes the services directory a Python package
# and allows importing service modules

from . import funds_service
from . import inventory_service
from . import ledger_service
from . import marketplace_service
from . import pricing
from . import user_service

__all__ = [
    "funds_service",
    "inventory_service",
    "ledger_service",
    "marketplace_service",
    "pricing",
    "user_service",
]
