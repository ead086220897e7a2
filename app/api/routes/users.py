from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.models.user import User
from app.schemas.auth import UserResponse, UserUpdate, PasswordChange
from app.dependencies.auth import get_current_user
from app.utils.auth import hash_password, verify_password

router = APIRouter()

MIN_PASSWORD_LENGTH = 6


@router.put("", response_model=UserResponse)
def update_profile(
    user_data: UserUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user)
):
    """Update user profile information"""
    if user_data.first_name is not None:
        user.first_name = user_data.first_name.strip() or None
    if user_data.last_name is not None:
        user.last_name = user_data.last_name.strip() or None

    db.commit()
    db.refresh(user)
    return user


@router.put("/password")
def change_password(
    password_data: PasswordChange,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user)
):
    """Change user password"""
    if not verify_password(password_data.old_password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect"
        )
    
    if password_data.old_password == password_data.new_password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="New password cannot be the same as current password"
        )
    
    if len(password_data.new_password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"New password must be at least {MIN_PASSWORD_LENGTH} characters"
        )
    
    user.hashed_password = hash_password(password_data.new_password)
    db.commit()
    
    return {
        "message": "Password changed successfully"
    }
