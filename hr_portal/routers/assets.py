from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from hr_portal.core.exceptions import ConflictError
from hr_portal.core.schemas import ApiResponse
from hr_portal.database import get_db
from hr_portal.models.asset import Asset
from hr_portal.models.user import User
from hr_portal.routers.auth_deps import require_hr
from hr_portal.schemas.asset import AssetCreate, AssetResponse

router = APIRouter(prefix="/assets", tags=["assets"])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_asset(
    payload: AssetCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_hr()),
):
    if db.query(Asset).filter(Asset.asset_code == payload.asset_code).first():
        raise ConflictError("Asset code already exists")

    asset = Asset(**payload.model_dump())
    db.add(asset)
    db.commit()
    db.refresh(asset)
    return ApiResponse.ok(data=AssetResponse.model_validate(asset), message="Asset created successfully")


@router.get("")
def list_assets(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_hr()),
):
    assets = db.query(Asset).order_by(Asset.created_at.desc(), Asset.id.desc()).all()
    return ApiResponse.ok(data=[AssetResponse.model_validate(a) for a in assets])
