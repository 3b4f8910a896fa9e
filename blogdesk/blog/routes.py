from flask import Blueprint, jsonify, request, current_app
from flask_login import current_user

from blogdesk import db, csrf
from blogdesk.access_store import store_errors
from blogdesk.api.schemas import BlogPostCreate, BlogPostUpdate, parse_payload
from blogdesk.errors import NotFoundError
from blogdesk.models import BlogPost
from blogdesk.navigation import (
    BLOG_CREATE_PAGE,
    BLOG_EDIT_PAGE,
    BLOG_ITEM_PAGE,
    BLOG_LIST_PAGE,
    Capability,
)
from blogdesk.permissions import require_page_permission

blog_bp = Blueprint("blog", __name__)
csrf.exempt(blog_bp)


def _get_post(post_id: int) -> BlogPost:
    with store_errors("post read"):
        post = db.session.get(BlogPost, post_id)
    if post is None:
        raise NotFoundError("Post not found")
    return post


@blog_bp.route("", methods=["GET"])
@require_page_permission(BLOG_LIST_PAGE, Capability.VIEW)
def list_posts():
    with store_errors("post list"):
        posts = BlogPost.query.order_by(BlogPost.created_at.desc(), BlogPost.id.desc()).all()
    return jsonify({"posts": [post.to_dict() for post in posts]})


@blog_bp.route("", methods=["POST"])
@require_page_permission(BLOG_CREATE_PAGE, Capability.ADD)
def create_post():
    payload = parse_payload(BlogPostCreate, request.get_json(silent=True))
    post = BlogPost(
        title=payload.title,
        content=payload.content,
        published=payload.published,
        author_id=current_user.id,
        author_name=current_user.display_name,
        author_email=current_user.email or "",
    )
    with store_errors("post create"):
        db.session.add(post)
        db.session.commit()
    current_app.logger.info("Post %s created by %s", post.id, current_user.id)
    return jsonify({"success": True, "message": "Post created successfully", "post": post.to_dict()}), 201


@blog_bp.route("/<int:post_id>", methods=["GET"])
@require_page_permission(BLOG_ITEM_PAGE, Capability.VIEW)
def get_post(post_id):
    post = _get_post(post_id)
    return jsonify({"success": True, "post": post.to_dict()})


@blog_bp.route("/<int:post_id>", methods=["PUT"])
@require_page_permission(BLOG_EDIT_PAGE, Capability.EDIT)
def update_post(post_id):
    post = _get_post(post_id)
    payload = parse_payload(BlogPostUpdate, request.get_json(silent=True))
    if payload.title:
        post.title = payload.title.strip()
    if payload.content:
        post.content = payload.content
    if payload.published is not None:
        post.published = payload.published
    with store_errors("post update"):
        db.session.commit()
    current_app.logger.info("Post %s updated by %s", post.id, current_user.id)
    return jsonify({"success": True, "message": "Post updated successfully", "post": post.to_dict()})


@blog_bp.route("/<int:post_id>", methods=["DELETE"])
@require_page_permission(BLOG_ITEM_PAGE, Capability.DELETE)
def delete_post(post_id):
    post = _get_post(post_id)
    with store_errors("post delete"):
        db.session.delete(post)
        db.session.commit()
    current_app.logger.info("Post %s deleted by %s", post_id, current_user.id)
    return jsonify({"success": True, "message": "Post deleted successfully"})
