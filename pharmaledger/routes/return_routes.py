from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import TenantContext, get_current_tenant, require_admin
from ..database import get_db
from ..schemas import ReturnCreate, ReturnResponse
from ..services import ReturnsService

router = APIRouter()

@router.post("", response_model=ReturnResponse, status_code=201)
def return_medicine(return_in: ReturnCreate, db: Session = Depends(get_db), ctx: TenantContext = Depends(require_admin)):
    return ReturnsService.return_to_supplier(
        db, ctx.tenant_id, return_in.medicine_lot_id, return_in.quantity, return_in.reason
    )

@router.get("", response_model=List[ReturnResponse])
def list_returns(db: Session = Depends(get_db), ctx: TenantContext = Depends(get_current_tenant)):
    return ReturnsService.list_returns(db, ctx.tenant_id)
