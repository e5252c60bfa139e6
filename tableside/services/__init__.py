"""Table lifecycle services

Routers stay thin and delegate to these classes, each constructed with the
request's ``AsyncSession``. ``run_in_transaction`` is the commit boundary.
"""

from tableside.services.areas import AreaRegistry
from tableside.services.tables import TableStore
from tableside.services.ledger import UsageHistoryLedger
from tableside.services.transitions import StatusTransitionEngine, ALLOWED_TRANSITIONS
from tableside.services.qr import QRCodeBinding
from tableside.services.unit_of_work import run_in_transaction

__all__ = [
    "AreaRegistry",
    "TableStore",
    "UsageHistoryLedger",
    "StatusTransitionEngine",
    "ALLOWED_TRANSITIONS",
    "QRCodeBinding",
    "run_in_transaction",
]
