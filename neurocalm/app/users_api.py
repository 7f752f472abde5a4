"""Mock user directory router (sign-up + admin listing); no credentials involved."""

from fastapi import APIRouter, Depends, HTTPException

from neurocalm.app.container import AppContainer
from neurocalm.app.dependencies import get_container
from neurocalm.db import SignUpRequest, UserRecord
from neurocalm.errors import UserExistsError, UserNotFoundError


router = APIRouter(prefix="/users", tags=["users"])


@router.post("", status_code=201)
async def sign_up(body: SignUpRequest, container: AppContainer = Depends(get_container)):
    user = UserRecord(name=body.name.strip(), email=body.email, role=body.role)
    try:
        saved = container.directory.add(user)
    except UserExistsError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return {"status": "ok", "user": saved.to_dict()}


@router.get("")
async def list_users(container: AppContainer = Depends(get_container)):
    users = container.directory.list()
    return {"status": "ok", "count": len(users), "users": [u.to_dict() for u in users]}


@router.get("/{user_id}")
async def read_user(user_id: str, container: AppContainer = Depends(get_container)):
    try:
        user = container.directory.get(user_id)
    except UserNotFoundError as exc:
        raise HTTPException(status_code=404, detail=f"User '{user_id}' not found") from exc
    return {"status": "ok", "user": user.to_dict()}


__all__ = ["router"]
