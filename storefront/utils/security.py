from fastapi import Request, HTTPException, Depends
from typing import Any, Dict, Optional

SESSION_USER_KEY = "user"

"""
Interface « utilisateur de session ».
Le flux OAuth Google (redirection, callback) est un collaborateur externe: il
dépose {id, email, role} dans la session signée (SessionMiddleware). Ici on ne
fait que lire/écrire cette entrée.
"""

def _session(request: Request) -> Dict[str, Any]:
    # request.session lève une AssertionError si SessionMiddleware n'est pas installé
    if "session" not in request.scope:
        return {}
    return request.session

def get_session_user(request: Request) -> Optional[Dict[str, Any]]:
    user = _session(request).get(SESSION_USER_KEY)
    return user if isinstance(user, dict) and user.get("id") else None

def set_session_user(request: Request, user: Dict[str, Any]) -> None:
    request.session[SESSION_USER_KEY] = {
        "id": str(user.get("id") or ""),
        "email": user.get("email") or "",
        "role": user.get("role") or "customer",
    }

def clear_session(request: Request) -> None:
    if "session" in request.scope:
        request.session.clear()

def get_current_user(request: Request) -> Dict[str, Any]:
    user = get_session_user(request)
    if not user:
        raise HTTPException(status_code=401, detail="Authentification requise.")
    return user

def require_user(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    return user
