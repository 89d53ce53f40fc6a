from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional

class AssetCreate(BaseModel):
    name: str
    asset_code: str
    category: str
    assigned_to: Optional[str] = None
    department: Optional[str] = None
    status: str = "Available"
    image: str = ""

class AssetResponse(AssetCreate):
    id: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
