from fastapi import Depends, HTTPException, status, Header, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from firebase_admin import auth
from typing import Optional
from sqlalchemy.orm import Session
from fitclub.database import get_db
from fitclub import crud, schemas
from fitclub.utils.logger import set_user_context

async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(HTTPBearer(auto_error=False)),
    x_user_id: Optional[str] = Header(None, alias="X-User-ID"),
    db: Session = Depends(get_db)
) -> schemas.CallerIdentity:
    """
    Verify Firebase ID token and resolve the caller's profile.
    Falls back to X-User-ID header if bearer token is not provided.

    Args:
        request: The incoming request; the resolved user id is stored on its state for rate limiting.
        credentials: The HTTP Authorization credentials.
        x_user_id: Optional X-User-ID header value.
        db: The database session.

    Returns:
        CallerIdentity: The caller, passed explicitly into every crud call

    Raises:
        HTTPException: If both token and X-User-ID are invalid or missing
    """
    if credentials is None and x_user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Either Bearer authentication or X-User-ID header is required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        if credentials:
            try:
                decoded_token = auth.verify_id_token(credentials.credentials)
            except Exception as firebase_error:
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail=f"Invalid token: {str(firebase_error)}",
                    headers={"WWW-Authenticate": "Bearer"},
                )

            user_id = decoded_token.get("uid")
            full_name = decoded_token.get("name")

            profile = crud.get_profile(db, user_id)
            if profile:
                if full_name:
                    profile = crud.update_profile_name(db, user_id, full_name)
            else:
                # First request from this Firebase user: new members sign up as members
                profile = crud.create_profile(db, user_id, email=decoded_token.get("email"), full_name=full_name)
        else:
            profile = crud.get_profile(db, x_user_id)
            if not profile:
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail="Invalid X-User-ID",
                )

        request.state.user_id = profile.id
        set_user_context(profile.id)
        return schemas.CallerIdentity(
            id=profile.id,
            user_type=profile.user_type,
            email=profile.email,
            username=profile.username,
            full_name=profile.full_name,
        )
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid authentication credentials: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_admin_user(current_user: schemas.CallerIdentity = Depends(get_current_user)) -> schemas.CallerIdentity:
    """Require the caller to be an admin."""
    if not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user
