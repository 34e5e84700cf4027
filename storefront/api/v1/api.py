from fastapi import APIRouter
from storefront.api.v1.endpoints import order_items

api_router = APIRouter()

api_router.include_router(order_items.router, tags=["orders"])
