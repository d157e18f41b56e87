from typing import Optional
from uuid import UUID
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from shared.models.users import Users
from shared.core.config import settings
from shared.core.schemas import UserToken
from shared.core.database import get_leasing_db as get_db

security = HTTPBearer()


def verify_token(token: str) -> UserToken:
    """Verify and decode a JWT token issued by the identity service."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET,
                             algorithms=[settings.JWT_ALGORITHM])
        user = UserToken(**payload)
    except (JWTError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token structure",
        )
    return user


def get_user(db: Session, user_id) -> Optional[Users]:
    if not isinstance(user_id, UUID):
        try:
            user_id = UUID(str(user_id))
        except ValueError:
            return None
    return db.query(Users).filter(
        Users.id == user_id,
        Users.is_deleted == False
    ).first()


def validate_current_token(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> UserToken:
    user_data = verify_token(credentials.credentials)

    user = get_user(db, user_data.user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    if user.status.lower() != "active":
        raise HTTPException(
            status_code=403, detail="User is not active. Access denied")

    user_data.status = user.status
    user_data.name = user_data.name or user.full_name
    return user_data
