import logging

from fastapi import APIRouter, Depends
from pymongo.errors import PyMongoError

import schemas
from database import document_helper, update_result, upsert_result
from dependencies import get_current_admin_user, get_current_user, get_user_store
from errors import Internal, InvalidArgument
from stores import UserStore

router = APIRouter()

@router.post("/user", summary="Créer ou rafraîchir un utilisateur à la connexion")
async def save_user(profile: schemas.UserProfile, users: UserStore = Depends(get_user_store)):
    data = profile.model_dump(mode="json", exclude_none=True)
    try:
        result = await users.upsert_login(data.pop("email"), data)
    except PyMongoError as e:
        logging.error(f"Échec de l'enregistrement de l'utilisateur {profile.email}: {e}")
        raise Internal("Failed to save user")
    return upsert_result(result)

@router.get("/users", summary="Lister les utilisateurs")
async def list_users(
    status: str = "all",
    users: UserStore = Depends(get_user_store),
    current_admin: schemas.User = Depends(get_current_admin_user)
):
    try:
        found = await users.list_users(status)
    except PyMongoError as e:
        logging.error(f"Échec de la lecture des utilisateurs: {e}")
        raise Internal("Failed to fetch users")
    return {"users": [document_helper(user) for user in found]}

@router.patch("/users/{user_id}/status", summary="Bloquer ou débloquer un utilisateur")
async def update_user_status(
    user_id: str,
    body: schemas.UserStatusUpdate,
    users: UserStore = Depends(get_user_store),
    current_admin: schemas.User = Depends(get_current_admin_user)
):
    try:
        result = await users.set_status(user_id, body.status)
    except PyMongoError as e:
        logging.error(f"Échec de la mise à jour du statut de {user_id}: {e}")
        raise Internal("Failed to update user status")
    logging.info(f"{current_admin.email} a passé l'utilisateur {user_id} en {body.status}")
    return update_result(result)

@router.patch("/users/{user_id}/role", summary="Modifier le rôle d'un utilisateur")
async def update_user_role(
    user_id: str,
    body: schemas.UserRoleUpdate,
    users: UserStore = Depends(get_user_store),
    current_admin: schemas.User = Depends(get_current_admin_user)
):
    try:
        result = await users.set_role(user_id, body.role)
    except PyMongoError as e:
        logging.error(f"Échec de la mise à jour du rôle de {user_id}: {e}")
        raise Internal("Failed to update user role")
    logging.info(f"{current_admin.email} a donné le rôle {body.role} à l'utilisateur {user_id}")
    return update_result(result)

@router.get("/users/role/{email}", summary="Obtenir le rôle d'un utilisateur")
async def get_user_role(
    email: str,
    users: UserStore = Depends(get_user_store),
    current_user: schemas.User = Depends(get_current_user)
):
    try:
        role = await users.find_role(email)
    except PyMongoError as e:
        logging.error(f"Échec de la lecture du rôle de {email}: {e}")
        raise Internal("Failed to fetch user role")
    return {"role": role}

@router.get("/search-donors", summary="Rechercher des donneurs actifs")
async def search_donors(
    bloodGroup: str | None = None,
    district: str | None = None,
    upazila: str | None = None,
    users: UserStore = Depends(get_user_store)
):
    if not bloodGroup or not district or not upazila:
        raise InvalidArgument("bloodGroup, district and upazila are required")
    try:
        donors = await users.search_donors(bloodGroup, district, upazila)
    except PyMongoError as e:
        logging.error(f"Échec de la recherche de donneurs: {e}")
        raise Internal("Failed to search donors")
    return [document_helper(donor) for donor in donors]
