from .enums import PartyProfile, MovementKind
from .parties import Party
from .inventory import Product, StockLevel, StockMovement
from .sales import Sale, SaleLine

__all__ = [
    'PartyProfile', 'MovementKind',
    'Party',
    'Product', 'StockLevel', 'StockMovement',
    'Sale', 'SaleLine',
]
