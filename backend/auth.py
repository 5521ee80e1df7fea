from typing import Optional

from fastapi import Cookie, HTTPException, Response, status
from pydantic import BaseModel

AUTH_FLAG = "isAuthenticated"
USER_NAME = "userName"
USER_TYPE = "userType"

USER_TYPES = ("faculty", "hod")


class SessionUser(BaseModel):
    username: str
    user_type: str


def set_session_flags(response: Response, username: str, user_type: str):
    response.set_cookie(key=AUTH_FLAG, value="true", samesite="lax")
    response.set_cookie(key=USER_NAME, value=username, samesite="lax")
    response.set_cookie(key=USER_TYPE, value=user_type, samesite="lax")


def clear_session_flags(response: Response):
    for key in (AUTH_FLAG, USER_NAME, USER_TYPE):
        response.delete_cookie(key)


def read_session_flags(
    auth_flag: Optional[str], username: Optional[str], user_type: Optional[str]
) -> Optional[SessionUser]:
    if auth_flag == "true" and username and user_type in USER_TYPES:
        return SessionUser(username=username, user_type=user_type)
    return None


async def get_current_user(
    auth_flag: Optional[str] = Cookie(None, alias=AUTH_FLAG),
    username: Optional[str] = Cookie(None, alias=USER_NAME),
    user_type: Optional[str] = Cookie(None, alias=USER_TYPE),
) -> SessionUser:
    user = read_session_flags(auth_flag, username, user_type)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated"
        )
    return user
