import logging

from fastapi import APIRouter, Depends
from pymongo.errors import PyMongoError

import schemas
from database import document_helper, insert_result
from dependencies import get_contact_store, get_current_admin_user
from errors import Internal
from stores import ContactStore

router = APIRouter(prefix="/contact")

@router.post("", summary="Envoyer un message de contact")
async def send_message(body: schemas.ContactCreate, contacts: ContactStore = Depends(get_contact_store)):
    try:
        result = await contacts.create(body.name, body.email, body.contact, body.message)
    except PyMongoError as e:
        logging.error(f"Échec de l'enregistrement du message de contact: {e}")
        raise Internal("Failed to send message")
    return insert_result(result)

@router.get("", summary="Lister les messages de contact (admin)")
async def list_messages(
    contacts: ContactStore = Depends(get_contact_store),
    current_admin: schemas.User = Depends(get_current_admin_user)
):
    try:
        found = await contacts.list()
    except PyMongoError as e:
        logging.error(f"Échec de la lecture des messages de contact: {e}")
        raise Internal("Failed to fetch messages")
    return [document_helper(message) for message in found]
