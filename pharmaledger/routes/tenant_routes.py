from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import TenantContext, get_current_tenant, require_admin
from ..database import get_db, unit_of_work
from ..models import Tenant
from ..schemas import TenantProfileUpdate, TenantResponse

router = APIRouter()

@router.get("/profile", response_model=TenantResponse)
def get_profile(db: Session = Depends(get_db), ctx: TenantContext = Depends(get_current_tenant)):
    return db.get(Tenant, ctx.tenant_id)

@router.put("/profile", response_model=TenantResponse)
def update_profile(profile: TenantProfileUpdate, db: Session = Depends(get_db), ctx: TenantContext = Depends(require_admin)):
    # Existing bills keep the name / GST number they were printed with
    with unit_of_work(db):
        tenant = db.get(Tenant, ctx.tenant_id)
        for field, value in profile.dict(exclude_unset=True).items():
            setattr(tenant, field, value)
    db.refresh(tenant)
    return tenant
