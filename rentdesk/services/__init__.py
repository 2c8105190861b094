from rentdesk.services import reconciliation_service
from rentdesk.services import occupancy_service
from rentdesk.services import payment_service
from rentdesk.services import contract_service
from rentdesk.services import import_classifier

__all__ = [
    "reconciliation_service",
    "occupancy_service",
    "payment_service",
    "contract_service",
    "import_classifier",
]
