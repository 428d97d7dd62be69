from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import Teacher
from app.auth.schemas import CurrentUser
from app.auth.security import decode_access_token
from app.db.session import get_db


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login-oauth")


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    """Resolve the authenticated teacher from the bearer access token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_access_token(token)
    if payload is None:
        raise credentials_exception

    teacher_id = payload.get("teacher_id")
    if teacher_id is None:
        try:
            teacher_id = int(payload.get("sub", ""))
        except ValueError:
            raise credentials_exception

    teacher = await db.get(Teacher, teacher_id)
    if not teacher:
        raise credentials_exception

    return CurrentUser(id=teacher.id, username=teacher.username, is_admin=bool(teacher.is_admin))
