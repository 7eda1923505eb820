import logging

from fastapi import APIRouter, Depends

from wanderai.api.deps import get_current_user, get_store, get_users, http_error
from wanderai.core.errors import WanderAIError
from wanderai.core.storage import KEY_PREFIX, KeyValueStore
from wanderai.models.domain import (
    ChangePasswordForm,
    LoginForm,
    ProfileEditForm,
    PublicUser,
    RegisterForm,
)
from wanderai.services.auth import UserDirectory

logger = logging.getLogger("wanderai_server")

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", response_model=PublicUser)
def register(form: RegisterForm, users: UserDirectory = Depends(get_users)):
    try:
        return users.register(form.name, form.email, form.password)
    except WanderAIError as e:
        raise http_error(e)


@router.post("/login", response_model=PublicUser)
def login(form: LoginForm, users: UserDirectory = Depends(get_users)):
    try:
        return users.login(form.email, form.password)
    except WanderAIError as e:
        raise http_error(e)


@router.post("/logout")
def logout(users: UserDirectory = Depends(get_users)):
    users.logout()
    return {"status": "logged_out"}


@router.get("/me", response_model=PublicUser)
def me(current_user: PublicUser = Depends(get_current_user)):
    return current_user


@router.put("/profile", response_model=PublicUser)
def update_profile(
    form: ProfileEditForm,
    users: UserDirectory = Depends(get_users),
    current_user: PublicUser = Depends(get_current_user),
):
    try:
        return users.update_profile(current_user.email, form.name)
    except WanderAIError as e:
        raise http_error(e)


@router.post("/password")
def change_password(
    form: ChangePasswordForm,
    users: UserDirectory = Depends(get_users),
    current_user: PublicUser = Depends(get_current_user),
):
    try:
        users.change_password(
            current_user.email, form.current_password, form.new_password
        )
    except WanderAIError as e:
        raise http_error(e)
    return {"status": "password_changed"}


@router.delete("/account")
def delete_account(
    users: UserDirectory = Depends(get_users),
    current_user: PublicUser = Depends(get_current_user),
):
    try:
        users.delete_account(current_user.email)
    except WanderAIError as e:
        raise http_error(e)
    return {"status": "deleted"}


@router.delete("/data")
def clear_all_data(
    store: KeyValueStore = Depends(get_store),
    current_user: PublicUser = Depends(get_current_user),
):
    """Removes every WanderAI key from the store, which also logs the user out."""
    removed = store.clear_prefix(KEY_PREFIX)
    logger.info(f"{current_user.email} cleared all application data ({removed} keys)")
    return {"status": "cleared", "removed": removed}
