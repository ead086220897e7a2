from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import logging
from app.db.session import get_db
from app.models.user import User
from app.schemas.auth import UserCreate, UserLogin, AuthResponse, UserResponse
from app.dependencies.auth import get_current_user
from app.services.subscriptions import create_inactive_subscription
from app.utils.auth import hash_password, verify_password, create_user_token

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def signup(user_data: UserCreate, db: Session = Depends(get_db)):
    """
    Register a new account.
    The account's subscription row is created in the same transaction, INACTIVE.
    """
    email = user_data.email.lower().strip()

    existing_user = db.query(User).filter(func.lower(User.email) == email).first()
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="This email is already registered. Please log in instead."
        )

    new_user = User(
        email=email,
        hashed_password=hash_password(user_data.password),
        first_name=user_data.first_name,
        last_name=user_data.last_name,
    )

    try:
        db.add(new_user)
        db.flush()  # Assigns new_user.id for the subscription row
        create_inactive_subscription(db, new_user.id, email)
        db.commit()
        db.refresh(new_user)
    except IntegrityError:
        # Another request registered the same email between the check and the insert
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="This email is already registered. Please log in instead."
        )

    logger.info("Created user %s (%s)", new_user.id, email)
    return {
        "message": "User created successfully",
        "token": create_user_token(new_user.id, new_user.email),
        "user": UserResponse.model_validate(new_user),
    }


@router.post("/signin", response_model=AuthResponse)
def signin(credentials: UserLogin, db: Session = Depends(get_db)):
    email = credentials.email.lower().strip()
    user = db.query(User).filter(func.lower(User.email) == email).first()

    if not user or not verify_password(credentials.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials"
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is deactivated"
        )

    return {
        "message": "Login successful",
        "token": create_user_token(user.id, user.email),
        "user": UserResponse.model_validate(user),
    }


@router.get("/me", response_model=UserResponse)
def me(user: User = Depends(get_current_user)):
    """Get current user profile"""
    return user
