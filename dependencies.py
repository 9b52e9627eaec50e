from fastapi import Depends, Request

import schemas
from auth import verify_token
from config import COOKIE_NAME
from database import get_mongo_db
from errors import Forbidden, Unauthenticated
from policy import can_administer, can_manage_users
from stores import (
    BlogStore,
    ContactStore,
    DonationRequestStore,
    FundStore,
    UserStore,
    load_districts,
)

# --- STORES (injectés par requête) ---

def get_user_store(db=Depends(get_mongo_db)) -> UserStore:
    return UserStore(db["users"], districts=load_districts())

def get_request_store(db=Depends(get_mongo_db), users: UserStore = Depends(get_user_store)) -> DonationRequestStore:
    return DonationRequestStore(db["donationRequests"], users)

def get_blog_store(db=Depends(get_mongo_db)) -> BlogStore:
    return BlogStore(db["blogs"])

def get_fund_store(db=Depends(get_mongo_db)) -> FundStore:
    return FundStore(db["funds"])

def get_contact_store(db=Depends(get_mongo_db)) -> ContactStore:
    return ContactStore(db["contacts"])

# --- DÉPENDANCES D'AUTHENTIFICATION ---

def get_token_identity(request: Request) -> dict:
    """Lit le cookie de session et retourne les claims du jeton."""
    token = request.cookies.get(COOKIE_NAME)
    if not token:
        raise Unauthenticated()
    return verify_token(token)

def get_optional_identity(request: Request) -> dict | None:
    token = request.cookies.get(COOKIE_NAME)
    if not token:
        return None
    return verify_token(token)

async def get_current_user(
    identity: dict = Depends(get_token_identity),
    users: UserStore = Depends(get_user_store),
) -> schemas.User:
    """Récupère l'utilisateur courant depuis MongoDB à partir de l'email du jeton."""
    user_data = await users.find_by_email(identity["email"])
    if user_data is None:
        raise Unauthenticated()

    return schemas.User(
        id=str(user_data.get('_id')),
        name=user_data.get('name'),
        email=user_data.get('email'),
        role=user_data.get('role'),
        status=user_data.get('status'),
    )

def get_current_admin_user(current_user: schemas.User = Depends(get_current_user)) -> schemas.User:
    """Vérifie que l'utilisateur actuel est un administrateur."""
    if not can_manage_users(current_user):
        raise Forbidden("Admin privileges required")
    return current_user

def get_current_staff_user(current_user: schemas.User = Depends(get_current_user)) -> schemas.User:
    """Vérifie que l'utilisateur actuel est un volontaire ou un administrateur."""
    if not can_administer(current_user):
        raise Forbidden("Admin or volunteer privileges required")
    return current_user
