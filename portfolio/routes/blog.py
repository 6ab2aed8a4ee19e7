"""
Portfolio Blog Routes
Blog posts (admin-authored) and reader comments
"""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from portfolio.database import Database
from portfolio.engines.access_engine import can_modify_comment, get_permissions
from portfolio.middleware.auth import get_current_user, get_optional_user, require_admin
from portfolio.models import BlogPostCreate, BlogPostUpdate, CommentCreate, CommentUpdate


router = APIRouter()


# ==========================================
# Posts
# ==========================================

@router.get("/posts")
async def get_posts(user: Optional[dict] = Depends(get_optional_user)):
    """Published posts for readers; admins get every post they wrote, drafts included"""
    db = Database(use_admin=True)
    is_admin = bool(user) and get_permissions(user.get("role")).is_admin
    posts = await db.get_blog_posts(user["id"] if is_admin else None)
    logger.info(f"[BLOG] GET /posts - admin view: {is_admin}, count: {len(posts)}")
    return {
        "success": True,
        "data": posts
    }


@router.get("/posts/{post_id}")
async def get_post(post_id: str, user: Optional[dict] = Depends(get_optional_user)):
    """Get a single post; drafts are visible to admins only"""
    db = Database(use_admin=True)
    post = await db.get_blog_post(post_id)

    is_admin = bool(user) and get_permissions(user.get("role")).is_admin
    if not post or (not post.get("published") and not is_admin):
        raise HTTPException(status_code=404, detail="Post not found")

    return {
        "success": True,
        "data": post
    }


@router.post("/posts")
async def create_post(data: BlogPostCreate, user: dict = Depends(require_admin)):
    """Create a blog post"""
    logger.info(f"[BLOG] POST /posts - user: {user['id']}, title: {data.title}")
    db = Database(use_admin=True)
    post = await db.create_blog_post({"user_id": user["id"], **data.model_dump()})

    if not post:
        raise HTTPException(status_code=500, detail="Failed to create blog post")

    return {
        "success": True,
        "data": post
    }


@router.patch("/posts/{post_id}")
async def update_post(post_id: str, data: BlogPostUpdate, user: dict = Depends(require_admin)):
    """Update a blog post"""
    db = Database(use_admin=True)
    post = await db.get_blog_post(post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")

    update_data = data.model_dump(exclude_none=True)
    if not update_data:
        return {"message": "No changes provided"}

    updated = await db.update_blog_post(post_id, update_data)
    if not updated:
        raise HTTPException(status_code=500, detail="Failed to update blog post")

    logger.info(f"[BLOG] Post {post_id} updated by {user['id']}")
    return {
        "success": True,
        "data": updated
    }


@router.delete("/posts/{post_id}")
async def delete_post(post_id: str, user: dict = Depends(require_admin)):
    """Delete a blog post and its comments"""
    db = Database(use_admin=True)
    post = await db.get_blog_post(post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")

    if not await db.delete_blog_post(post_id):
        raise HTTPException(status_code=500, detail="Failed to delete blog post")

    logger.info(f"[BLOG] Post {post_id} deleted by {user['id']}")
    return {
        "success": True,
        "message": "Post deleted"
    }


# ==========================================
# Comments
# ==========================================

@router.get("/posts/{post_id}/comments")
async def get_comments(post_id: str, user: Optional[dict] = Depends(get_optional_user)):
    """Comments on a post, oldest first; a draft's comments are visible to admins only"""
    db = Database(use_admin=True)
    post = await db.get_blog_post(post_id)

    is_admin = bool(user) and get_permissions(user.get("role")).is_admin
    if not post or (not post.get("published") and not is_admin):
        raise HTTPException(status_code=404, detail="Post not found")

    comments = await db.get_comments(post_id)
    return {
        "success": True,
        "data": comments
    }


@router.post("/posts/{post_id}/comments")
async def create_comment(post_id: str, data: CommentCreate, user: dict = Depends(get_current_user)):
    """Comment on a post (specialized and admin accounts)"""
    if not get_permissions(user.get("role")).can_comment:
        logger.info(f"[BLOG] Comment blocked for user {user['id']} (role: {user.get('role')})")
        raise HTTPException(
            status_code=403,
            detail="Specialized access is required to comment",
            headers={"X-Required-Role": "specialized"}
        )

    db = Database(use_admin=True)
    post = await db.get_blog_post(post_id)
    if not post or not post.get("published"):
        raise HTTPException(status_code=404, detail="Post not found")

    comment = await db.create_comment({
        "post_id": post_id,
        "user_id": user["id"],
        "content": data.content
    })
    if not comment:
        raise HTTPException(status_code=500, detail="Failed to create comment")

    return {
        "success": True,
        "data": comment
    }


@router.patch("/comments/{comment_id}")
async def update_comment(comment_id: str, data: CommentUpdate, user: dict = Depends(get_current_user)):
    """Edit a comment (author or admin)"""
    db = Database(use_admin=True)
    comment = await db.get_comment(comment_id)
    if not comment:
        raise HTTPException(status_code=404, detail="Comment not found")

    if not can_modify_comment(user, comment):
        raise HTTPException(status_code=403, detail="You can only edit your own comments")

    updated = await db.update_comment(comment_id, {"content": data.content})
    if not updated:
        raise HTTPException(status_code=500, detail="Failed to update comment")

    return {
        "success": True,
        "data": updated
    }


@router.delete("/comments/{comment_id}")
async def delete_comment(comment_id: str, user: dict = Depends(get_current_user)):
    """Delete a comment (author or admin)"""
    db = Database(use_admin=True)
    comment = await db.get_comment(comment_id)
    if not comment:
        raise HTTPException(status_code=404, detail="Comment not found")

    if not can_modify_comment(user, comment):
        raise HTTPException(status_code=403, detail="You can only delete your own comments")

    if not await db.delete_comment(comment_id):
        raise HTTPException(status_code=500, detail="Failed to delete comment")

    logger.info(f"[BLOG] Comment {comment_id} deleted by {user['id']}")
    return {
        "success": True,
        "message": "Comment deleted"
    }
