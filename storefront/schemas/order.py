from pydantic import BaseModel, ConfigDict
from typing import Optional

class ItemStatusRequest(BaseModel):
    # action and order_item_id are checked by the endpoint so that a single
    # combined error is reported when either is missing
    model_config = ConfigDict(extra="ignore")
    action: Optional[str] = None
    order_item_id: Optional[str] = None
    reason: Optional[str] = None
    guest_session_id: Optional[str] = None
    shipping_partner: Optional[str] = None
    tracking_id: Optional[str] = None
    tracking_url: Optional[str] = None

class RecomputeOrderStatusRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")
    order_id: Optional[str] = None
    guest_session_id: Optional[str] = None
