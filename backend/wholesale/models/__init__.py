from .catalog import Product, CourierRate
from .profiles import Profile
from .orders import Order, OrderItem, OrderSequence, OrderChannel
from .inventory import InventoryMovement, InventoryLevel
from .ledgers import Expense, Receivable, Payable, LedgerEvent

__all__ = [
    'Product', 'CourierRate',
    'Profile',
    'Order', 'OrderItem', 'OrderSequence', 'OrderChannel',
    'InventoryMovement', 'InventoryLevel',
    'Expense', 'Receivable', 'Payable', 'LedgerEvent',
]
