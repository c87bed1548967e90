from typing import Any, Dict
from fastapi import APIRouter, Depends, Request

from storefront.utils.security import clear_session, require_user

router = APIRouter(prefix="/api", tags=["Auth"])

@router.get("/me")
def me(user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    return user

@router.post("/logout")
def logout(request: Request) -> Dict[str, Any]:
    clear_session(request)
    return {"ok": True}
