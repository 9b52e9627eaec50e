import logging
from datetime import datetime, timezone

from pymongo import DESCENDING

from database import to_object_id
from errors import Forbidden, InvalidArgument, InvalidTransition, NotFound
from models import (
    DONATION_STATUS_VALUES,
    FINAL_STATUSES,
    DonationStatus,
    can_transition,
)
from policy import can_administer, can_create_request

STATUS_FIELD = "donationStatus"
BLOCKED_MESSAGE = "Access denied. You are blocked."
RECENT_LIMIT = 3


def _status_query(query: dict, status: str | None) -> dict:
    # Les valeurs de filtre inconnues sont ignorées, pas rejetées
    if status in DONATION_STATUS_VALUES:
        query[STATUS_FIELD] = status
    return query


class DonationRequestStore:
    """
    Collection `donationRequests` et cycle de vie du statut :
    pending -> inprogress -> done | canceled.
    Les gardes de transition filtrent sur `_id` ET le statut courant,
    donc une transition concurrente en double ne modifie rien.
    """

    def __init__(self, collection, users):
        self.collection = collection
        self.users = users

    async def create(self, requester_email: str, details: dict):
        user = await self.users.find_by_email(requester_email) if requester_email else None
        if not can_create_request(user):
            logging.warning(f"Création refusée pour {requester_email}: utilisateur bloqué ou inconnu")
            raise Forbidden(BLOCKED_MESSAGE)

        request = dict(details)
        request.pop("_id", None)
        request.pop("status", None)
        request["requesterEmail"] = requester_email
        request[STATUS_FIELD] = DonationStatus.pending.value
        request["createdAt"] = datetime.now(timezone.utc)

        result = await self.collection.insert_one(request)
        logging.info(f"Demande de don {result.inserted_id} créée par {requester_email}")
        return result

    async def transition_status(self, request_id: str, new_status: str, actor=None) -> bool:
        """Passe une demande `inprogress` à `done` ou `canceled`. Retourne True si modifiée."""
        if new_status not in FINAL_STATUSES:
            raise InvalidArgument("Invalid status update")
        result = await self.collection.update_one(
            {"_id": to_object_id(request_id), STATUS_FIELD: DonationStatus.inprogress.value},
            {"$set": {STATUS_FIELD: new_status}}
        )
        changed = result.modified_count > 0
        who = actor.get("email") if isinstance(actor, dict) else getattr(actor, "email", None)
        logging.info(f"Transition {request_id} -> {new_status} par {who}: {'ok' if changed else 'aucun changement'}")
        return changed

    async def list_for_owner(self, email: str, status: str | None = None) -> list:
        query = _status_query({"requesterEmail": email}, status)
        return await self.collection.find(query).sort([("_id", DESCENDING)]).to_list(length=None)

    async def list_recent_for_owner(self, email: str, limit: int = RECENT_LIMIT) -> list:
        cursor = (
            self.collection.find({"requesterEmail": email})
            .sort([("createdAt", DESCENDING), ("_id", DESCENDING)])
            .limit(limit)
        )
        return await cursor.to_list(length=None)

    async def list_all(self, actor, status: str | None = None) -> list:
        if not can_administer(actor):
            raise Forbidden("forbidden access")
        query = _status_query({}, status)
        return await self.collection.find(query).sort([("_id", DESCENDING)]).to_list(length=None)

    async def get_by_id(self, request_id: str) -> dict:
        request = await self.collection.find_one({"_id": to_object_id(request_id)})
        if not request:
            raise NotFound("Not found")
        return request

    async def update(self, request_id: str, fields: dict):
        """
        Met à jour un sous-ensemble de champs. Aucune vérification de
        propriétaire ici : le flux "je donne" modifie la demande d'un autre
        utilisateur. Un changement de statut doit respecter la table de transitions.
        """
        object_id = to_object_id(request_id)
        update_data = {k: v for k, v in fields.items() if k not in ("_id", "id")}
        query = {"_id": object_id}

        if STATUS_FIELD in update_data:
            new_status = update_data[STATUS_FIELD]
            if new_status not in DONATION_STATUS_VALUES:
                raise InvalidArgument("Invalid status")
            current = await self.get_by_id(request_id)
            current_status = current.get(STATUS_FIELD)
            if new_status != current_status:
                if not can_transition(current_status, new_status):
                    raise InvalidTransition(f"Cannot move request from {current_status} to {new_status}")
                query[STATUS_FIELD] = current_status

        if not update_data:
            raise InvalidArgument("Nothing to update")

        result = await self.collection.update_one(query, {"$set": update_data})
        if result.matched_count == 0:
            if STATUS_FIELD in query:
                # le statut a changé entre la lecture et l'écriture
                raise InvalidTransition("Request status changed concurrently")
            raise NotFound("Not found")
        return result

    async def delete(self, request_id: str) -> bool:
        result = await self.collection.delete_one({"_id": to_object_id(request_id)})
        return result.deleted_count > 0

    async def count(self) -> int:
        return await self.collection.count_documents({})
