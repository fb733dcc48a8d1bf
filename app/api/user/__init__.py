from fastapi import APIRouter, HTTPException, Depends
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import BaseModel
from mongoengine import ValidationError

from app.models.user import User
from app.services.auth import TokenResponse, authenticate_user, get_current_user, issue_token
from app.services.users import DuplicateEmailError, acreate_user, add_favourite, remove_favourite
from app.utils.security import HashingError


router = APIRouter()


class SignupBody(BaseModel):
    first_name: str
    last_name: str | None = None
    email: str
    password: str
    phone_number: str | None = None


@router.post("/signup", response_model=TokenResponse)
async def signup(body: SignupBody) -> TokenResponse:
    # Self-registration always creates a plain "user"; other roles are granted by admins
    try:
        user = await acreate_user(**body.model_dump(exclude_none=True))
    except DuplicateEmailError:
        raise HTTPException(status_code=409, detail="Email already registered")
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.to_dict() or str(exc))
    except HashingError:
        raise HTTPException(status_code=500, detail="Could not store credentials")
    return issue_token(user)


@router.post("/login", response_model=TokenResponse)
async def login(form_data: OAuth2PasswordRequestForm = Depends()) -> TokenResponse:
    # username carries the email; same error whether or not the email exists
    user = await authenticate_user(form_data.username, form_data.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return issue_token(user)


@router.get("/me")
def me(current_user: User = Depends(get_current_user)) -> dict:
    return current_user.to_output()


@router.put("/me/favourites/{property_id}")
def save_favourite(property_id: str, current_user: User = Depends(get_current_user)) -> dict:
    try:
        user = add_favourite(current_user, property_id)
    except ValidationError:
        raise HTTPException(status_code=422, detail="Invalid property id")
    return {"favourites": [str(pk) for pk in user.favourites]}


@router.delete("/me/favourites/{property_id}")
def delete_favourite(property_id: str, current_user: User = Depends(get_current_user)) -> dict:
    try:
        user = remove_favourite(current_user, property_id)
    except ValidationError:
        raise HTTPException(status_code=422, detail="Invalid property id")
    return {"favourites": [str(pk) for pk in user.favourites]}
