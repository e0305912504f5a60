import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from .config import settings
from .database import get_db
from .models import Tenant

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"

# Tokens are issued by the identity service; this URL is only advertised in the docs
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")


@dataclass
class TenantContext:
    tenant_id: int
    subdomain: str
    username: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


async def get_current_user_data(token: str = Depends(oauth2_scheme)):
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise credentials_exception
    if payload.get("sub") is None or payload.get("tenant_id") is None:
        raise credentials_exception
    return payload


def get_current_tenant(
    x_tenant_id: str = Header(...),
    payload: dict = Depends(get_current_user_data),
    db: Session = Depends(get_db),
) -> TenantContext:
    if payload.get("tenant_id") != x_tenant_id:
        logger.warning(
            "Token tenant '%s' != header tenant '%s'", payload.get("tenant_id"), x_tenant_id
        )
        raise HTTPException(status_code=403, detail="Not authorized for this tenant")

    tenant = db.query(Tenant).filter(Tenant.subdomain == x_tenant_id).first()
    if not tenant:
        raise HTTPException(status_code=404, detail=f"Tenant '{x_tenant_id}' not found")
    if not tenant.is_active or tenant.status != "Approved":
        raise HTTPException(status_code=403, detail="Pharmacy account is not active")

    return TenantContext(
        tenant_id=tenant.id,
        subdomain=tenant.subdomain,
        username=payload["sub"],
        role=payload.get("role", "staff"),
    )


def require_admin(ctx: TenantContext = Depends(get_current_tenant)) -> TenantContext:
    if not ctx.is_admin:
        raise HTTPException(status_code=403, detail="Pharmacy admin access required")
    return ctx
