from rentdesk.api.routes.properties import router as properties_router
from rentdesk.api.routes.units import router as units_router
from rentdesk.api.routes.clients import router as clients_router
from rentdesk.api.routes.contracts import router as contracts_router
from rentdesk.api.routes.payments import router as payments_router
from rentdesk.api.routes.maintenance import router as maintenance_router
from rentdesk.api.routes.settings import router as settings_router
from rentdesk.api.routes.imports import router as imports_router

__all__ = [
    "properties_router",
    "units_router",
    "clients_router",
    "contracts_router",
    "payments_router",
    "maintenance_router",
    "settings_router",
    "imports_router",
]
