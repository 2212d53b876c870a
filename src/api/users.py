"""User API endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from src.api.deps import get_user
from src.database import get_db
from src.models.user import User as UserModel
from src.schemas.user import User, UserCreate, UserUpdate

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.post("/", response_model=User, status_code=201)
def create_user(user: UserCreate, db: Session = Depends(get_db)) -> UserModel:
    """Create a new user with an empty insight collection."""
    db_user = UserModel(**user.model_dump())
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


@router.get("/", response_model=list[User])
def list_users(skip: int = 0, limit: int = 100, db: Session = Depends(get_db)) -> list[UserModel]:
    """List all users."""
    return db.query(UserModel).order_by(UserModel.id).offset(skip).limit(limit).all()


@router.get("/{user_id}", response_model=User)
def read_user(user: UserModel = Depends(get_user)) -> UserModel:
    """Get a user by ID."""
    return user


@router.patch("/{user_id}", response_model=User)
def update_user(
    user_update: UserUpdate,
    user: UserModel = Depends(get_user),
    db: Session = Depends(get_db),
) -> UserModel:
    """Rename a user or change the timezone used for local-day checks."""
    for field, value in user_update.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(user, field, value)

    db.commit()
    db.refresh(user)
    return user


@router.delete("/{user_id}", status_code=204)
def delete_user(user: UserModel = Depends(get_user), db: Session = Depends(get_db)) -> None:
    """Delete a user together with every stored value."""
    db.delete(user)
    db.commit()
