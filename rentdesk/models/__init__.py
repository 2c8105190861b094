# Import all models so they are registered with Base
from rentdesk.models.property import Property, Unit
from rentdesk.models.client import Client
from rentdesk.models.contract import Contract, ContractStatus
from rentdesk.models.payment import Payment, PaymentStatus, PaymentMethod
from rentdesk.models.maintenance import MaintenanceRequest, MaintenanceStatus, MaintenancePriority
from rentdesk.models.preference import UserPreference

__all__ = [
    "Property",
    "Unit",
    "Client",
    "Contract",
    "ContractStatus",
    "Payment",
    "PaymentStatus",
    "PaymentMethod",
    "MaintenanceRequest",
    "MaintenanceStatus",
    "MaintenancePriority",
    "UserPreference",
]
