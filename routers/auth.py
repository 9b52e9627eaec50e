from fastapi import APIRouter
from fastapi.responses import JSONResponse

import schemas
from auth import issue_token
from config import COOKIE_NAME, IS_PRODUCTION

router = APIRouter()

def _cookie_options() -> dict:
    return {
        "secure": IS_PRODUCTION,
        "samesite": "none" if IS_PRODUCTION else "strict",
    }

@router.post("/jwt", response_model=schemas.Success)
def generate_token(identity: schemas.Identity):
    """
    Émet le jeton de session (valide 365 jours) dans un cookie HTTP-only.
    """
    token = issue_token(identity.model_dump(mode="json", exclude_none=True))
    response = JSONResponse({"success": True})
    response.set_cookie(COOKIE_NAME, token, httponly=True, **_cookie_options())
    return response

@router.get("/logout", response_model=schemas.Success)
def logout():
    """Efface le cookie ; le jeton lui-même reste valide jusqu'à expiration."""
    response = JSONResponse({"success": True})
    response.delete_cookie(COOKIE_NAME, httponly=True, **_cookie_options())
    return response
