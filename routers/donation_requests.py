import logging

from fastapi import APIRouter, Depends
from pymongo.errors import PyMongoError

import schemas
from database import delete_result, document_helper, insert_result, update_result
from dependencies import (
    get_current_staff_user,
    get_current_user,
    get_optional_identity,
    get_request_store,
    get_token_identity,
)
from errors import Forbidden, Internal, NotFound
from policy import can_delete_request
from stores import DonationRequestStore

router = APIRouter()

# --- Espace donneur ---

@router.get("/requests/recent", summary="Les 3 demandes les plus récentes de l'utilisateur")
async def recent_requests(
    identity: dict = Depends(get_token_identity),
    store: DonationRequestStore = Depends(get_request_store)
):
    try:
        requests = await store.list_recent_for_owner(identity["email"])
    except PyMongoError as e:
        logging.error(f"Échec de la lecture des demandes récentes de {identity['email']}: {e}")
        raise Internal("Failed to fetch donation requests")
    return [document_helper(r) for r in requests]

@router.post("/create-donation-request", summary="Créer une demande de don")
async def create_donation_request(
    body: schemas.DonationRequestCreate,
    identity: dict | None = Depends(get_optional_identity),
    store: DonationRequestStore = Depends(get_request_store)
):
    details = body.model_dump(mode="json", exclude_none=True)
    requester_email = details.pop("requesterEmail", None)
    if identity is not None:
        # Avec un cookie, le demandeur est toujours l'utilisateur connecté
        if requester_email and requester_email != identity["email"]:
            raise Forbidden("requesterEmail must match the signed-in user")
        requester_email = identity["email"]

    try:
        result = await store.create(requester_email, details)
    except PyMongoError as e:
        logging.error(f"Erreur lors de la création de la demande de don: {e}")
        raise Internal("Server error")
    return insert_result(result)

@router.put("/requests/{request_id}/status", response_model=schemas.Success, summary="Terminer ou annuler une demande en cours")
async def finish_request(
    request_id: str,
    body: schemas.StatusUpdate,
    identity: dict = Depends(get_token_identity),
    store: DonationRequestStore = Depends(get_request_store)
):
    try:
        changed = await store.transition_status(request_id, body.status, identity)
    except PyMongoError as e:
        logging.error(f"Erreur lors de la mise à jour du statut de {request_id}: {e}")
        raise Internal("Error updating status")
    return {"success": changed}

@router.get("/donation-requests", summary="Demandes de l'utilisateur connecté")
async def my_donation_requests(
    status: str | None = None,
    identity: dict = Depends(get_token_identity),
    store: DonationRequestStore = Depends(get_request_store)
):
    try:
        requests = await store.list_for_owner(identity["email"], status)
    except PyMongoError as e:
        logging.error(f"Échec de la lecture des demandes de {identity['email']}: {e}")
        raise Internal("Failed to fetch donation requests")
    return [document_helper(r) for r in requests]

@router.get("/donation-requests/{request_id}", summary="Obtenir une demande par son ID")
async def get_donation_request(
    request_id: str,
    identity: dict = Depends(get_token_identity),
    store: DonationRequestStore = Depends(get_request_store)
):
    try:
        request = await store.get_by_id(request_id)
    except PyMongoError as e:
        logging.error(f"Échec de la lecture de la demande {request_id}: {e}")
        raise Internal("Error fetching request")
    return document_helper(request)

@router.put("/donation-requests/{request_id}", summary="Mettre à jour une demande")
async def update_donation_request(
    request_id: str,
    body: schemas.DonationRequestUpdate,
    identity: dict = Depends(get_token_identity),
    store: DonationRequestStore = Depends(get_request_store)
):
    try:
        result = await store.update(request_id, body.model_dump(mode="json", exclude_unset=True))
    except PyMongoError as e:
        logging.error(f"Erreur lors de la mise à jour de la demande {request_id}: {e}")
        raise Internal("Update failed")
    return update_result(result)

@router.delete("/donation-requests/{request_id}", summary="Supprimer une demande")
async def delete_donation_request(
    request_id: str,
    current_user: schemas.User = Depends(get_current_user),
    store: DonationRequestStore = Depends(get_request_store)
):
    try:
        request = await store.get_by_id(request_id)
        if not can_delete_request(current_user, request):
            raise Forbidden("forbidden access")
        removed = await store.delete(request_id)
    except PyMongoError as e:
        logging.error(f"Erreur lors de la suppression de la demande {request_id}: {e}")
        raise Internal("Delete failed")
    if not removed:
        raise NotFound("Not found")
    logging.info(f"Demande {request_id} supprimée par {current_user.email}")
    return delete_result(removed)

# --- Espace admin / volontaire ---

@router.get("/all-donation-requests", summary="Toutes les demandes (admin ou volontaire)")
async def all_donation_requests(
    status: str | None = None,
    current_user: schemas.User = Depends(get_current_user),
    store: DonationRequestStore = Depends(get_request_store)
):
    try:
        requests = await store.list_all(current_user, status)
    except PyMongoError as e:
        logging.error(f"Échec de la lecture de toutes les demandes: {e}")
        raise Internal("Failed to fetch donation requests")
    return [document_helper(r) for r in requests]

@router.put("/donation-requests/{request_id}/status", response_model=schemas.Success, summary="Transition de statut par un admin ou volontaire")
async def staff_finish_request(
    request_id: str,
    body: schemas.StatusUpdate,
    current_user: schemas.User = Depends(get_current_staff_user),
    store: DonationRequestStore = Depends(get_request_store)
):
    try:
        changed = await store.transition_status(request_id, body.status, current_user)
    except PyMongoError as e:
        logging.error(f"Erreur lors de la mise à jour du statut de {request_id}: {e}")
        raise Internal("Error updating status")
    return {"success": changed}
