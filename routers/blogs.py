import logging

from fastapi import APIRouter, Depends
from pymongo.errors import PyMongoError

import schemas
from database import delete_result, document_helper, insert_result, update_result
from dependencies import get_blog_store, get_current_admin_user, get_current_staff_user
from errors import Internal, NotFound
from stores import BlogStore

router = APIRouter(prefix="/blogs")

@router.get("", summary="Lister les blogs")
async def list_blogs(status: str = "all", blogs: BlogStore = Depends(get_blog_store)):
    try:
        found = await blogs.list(status)
    except PyMongoError as e:
        logging.error(f"Échec de la lecture des blogs: {e}")
        raise Internal("Failed to fetch blogs")
    return [document_helper(blog) for blog in found]

@router.get("/{blog_id}", summary="Obtenir un blog")
async def get_blog(blog_id: str, blogs: BlogStore = Depends(get_blog_store)):
    try:
        blog = await blogs.get_by_id(blog_id)
    except PyMongoError as e:
        logging.error(f"Échec de la lecture du blog {blog_id}: {e}")
        raise Internal("Failed to fetch blog")
    return document_helper(blog)

@router.post("", summary="Créer un blog (brouillon)")
async def create_blog(
    body: schemas.BlogCreate,
    blogs: BlogStore = Depends(get_blog_store),
    current_user: schemas.User = Depends(get_current_staff_user)
):
    try:
        result = await blogs.create(body.title, body.content, body.thumbnail)
    except PyMongoError as e:
        logging.error(f"Échec de la création du blog: {e}")
        raise Internal("Failed to create blog")
    return insert_result(result)

@router.patch("/{blog_id}/status", summary="Publier ou dépublier un blog (admin)")
async def update_blog_status(
    blog_id: str,
    body: schemas.BlogStatusUpdate,
    blogs: BlogStore = Depends(get_blog_store),
    current_admin: schemas.User = Depends(get_current_admin_user)
):
    try:
        result = await blogs.set_status(blog_id, body.status.value)
    except PyMongoError as e:
        logging.error(f"Échec de la mise à jour du blog {blog_id}: {e}")
        raise Internal("Failed to update blog status")
    return update_result(result)

@router.delete("/{blog_id}", summary="Supprimer un blog (admin)")
async def delete_blog(
    blog_id: str,
    blogs: BlogStore = Depends(get_blog_store),
    current_admin: schemas.User = Depends(get_current_admin_user)
):
    try:
        removed = await blogs.delete(blog_id)
    except PyMongoError as e:
        logging.error(f"Échec de la suppression du blog {blog_id}: {e}")
        raise Internal("Failed to delete blog")
    if not removed:
        raise NotFound("Blog not found")
    return delete_result(removed)
