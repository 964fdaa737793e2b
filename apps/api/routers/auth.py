from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from bookreviews.db.crud import UserCRUD
from bookreviews.db.models import User

from ..core.auth import authenticate_user, create_token, hash_password
from ..core.deps import get_current_user, get_db
from ..core.serialize import serialize_user
from ..schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from ..schemas.user import UserOut

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, db: Session = Depends(get_db)):
    try:
        user = UserCRUD.create(
            db,
            email=body.email,
            name=body.name,
            username=body.username,
            password_hash=hash_password(body.password),
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    db.commit()
    return TokenResponse(access_token=create_token(user.id, user.role))


@router.post("/login", response_model=TokenResponse)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    user = authenticate_user(db, body.email, body.password)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return TokenResponse(access_token=create_token(user.id, user.role))


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)):
    return serialize_user(current_user)
