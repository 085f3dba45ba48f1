from fastapi import APIRouter
from golden_store.api.v1.endpoints import backup, clients, orders, over, price_list

api_router = APIRouter()

api_router.include_router(clients.router, prefix="/clients", tags=["clients"])
api_router.include_router(orders.router, prefix="/orders", tags=["orders"])
api_router.include_router(price_list.router, prefix="/price-list", tags=["price list"])
api_router.include_router(over.router, prefix="/over", tags=["over"])
api_router.include_router(backup.router, prefix="/backup", tags=["backup"])
