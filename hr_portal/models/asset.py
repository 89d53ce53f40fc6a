from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from hr_portal.database import Base


class Asset(Base):
    __tablename__ = "assets"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    asset_code = Column(String, unique=True, index=True, nullable=False)
    category = Column(String, nullable=False)
    assigned_to = Column(String, nullable=True)
    department = Column(String, nullable=True)
    status = Column(String, default="Available")
    image = Column(String, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
