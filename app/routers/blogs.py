import logging
import math
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.deps import get_code_verifier, require_admin_key
from app.models.blog import BlogPost
from app.schemas.blog import BlogPostItem, CreateBlogPostRequest, MessageResponse, UpdateBlogPostRequest
from app.schemas.otp import DeleteConfirmRequest, ErrorResponse
from app.services.otp import CodeVerifier, Expired, NotFoundOrMismatch, StoreUnavailable

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/blogs", tags=["Blogs"])

WORDS_PER_MINUTE = 200
REQUIRED_FIELDS = {"title", "content", "date", "time"}


def estimate_read_time(content: str) -> str:
    words = len(content.split())
    return f"{max(1, math.ceil(words / WORDS_PER_MINUTE))} min read"


def _to_item(post: BlogPost) -> BlogPostItem:
    return BlogPostItem(
        id=str(post.id),
        title=post.title,
        description=post.description,
        content=post.content,
        tags=post.tags or [],
        read_time=post.read_time,
        date=post.date,
        time=post.time,
        created_at=post.created_at,
        updated_at=post.updated_at,
    )


def _parse_post_id(blog_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(blog_id)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Blog post not found")


async def _get_post_or_404(db: AsyncSession, blog_id: str) -> BlogPost:
    pk = _parse_post_id(blog_id)
    result = await db.execute(select(BlogPost).where(BlogPost.id == pk))
    post = result.scalar_one_or_none()
    if not post:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Blog post not found")
    return post


async def _verify_then_delete(blog_id: str, presented: str | None, verifier: CodeVerifier, db: AsyncSession) -> MessageResponse:
    # An id that can never match must not cost the caller their code.
    _parse_post_id(blog_id)
    if not presented:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="OTP_REQUIRED")
    if not settings.OTP_RECIPIENT_EMAIL:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="SERVER_CONFIGURATION_MISSING")

    # The code must be consumed before anything is deleted.
    try:
        await verifier.verify_and_consume(settings.OTP_RECIPIENT_EMAIL, presented)
    except (NotFoundOrMismatch, Expired) as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.code)
    except StoreUnavailable as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.code)

    post = await _get_post_or_404(db, blog_id)
    await db.delete(post)
    await db.commit()
    logger.info("[Blogs] Post %s deleted", blog_id)
    return MessageResponse(message="Deleted successfully")


@router.get("", response_model=list[BlogPostItem], summary="List blog posts", description="All posts, newest `date`/`time` first.")
async def list_posts(
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(BlogPost)
        .order_by(BlogPost.date.desc(), BlogPost.time.desc(), BlogPost.created_at.desc())
        .limit(limit)
    )
    return [_to_item(p) for p in result.scalars().all()]


@router.get("/{blog_id}", response_model=BlogPostItem, responses={404: {"model": ErrorResponse}}, summary="Get a blog post")
async def get_post(blog_id: str, db: AsyncSession = Depends(get_db)):
    return _to_item(await _get_post_or_404(db, blog_id))


@router.post(
    "",
    response_model=BlogPostItem,
    status_code=status.HTTP_201_CREATED,
    responses={401: {"model": ErrorResponse}},
    summary="Create a blog post",
    description="Requires the `X-Admin-Key` header. `date`/`time` default to the current UTC time, `read_time` is derived from the content.",
)
async def create_post(
    body: CreateBlogPostRequest,
    _admin: None = Depends(require_admin_key),
    db: AsyncSession = Depends(get_db),
):
    now = datetime.now(timezone.utc)
    post = BlogPost(
        title=body.title,
        description=body.description,
        content=body.content,
        tags=body.tags,
        read_time=estimate_read_time(body.content),
        date=body.date or now.strftime("%Y-%m-%d"),
        time=body.time or now.strftime("%H:%M"),
    )
    db.add(post)
    await db.commit()
    await db.refresh(post)
    return _to_item(post)


@router.put(
    "/{blog_id}",
    response_model=BlogPostItem,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Update a blog post",
    description="Requires the `X-Admin-Key` header. Only supplied fields change.",
)
async def update_post(
    blog_id: str,
    body: UpdateBlogPostRequest,
    _admin: None = Depends(require_admin_key),
    db: AsyncSession = Depends(get_db),
):
    post = await _get_post_or_404(db, blog_id)

    for field, value in body.model_dump(exclude_unset=True).items():
        if value is None and field in REQUIRED_FIELDS:
            continue
        setattr(post, field, value)
    if body.content is not None:
        post.read_time = estimate_read_time(body.content)

    await db.commit()
    await db.refresh(post)
    return _to_item(post)


@router.delete(
    "/{blog_id}",
    response_model=MessageResponse,
    responses={
        401: {"model": ErrorResponse, "description": "OTP_REQUIRED, INVALID_OR_EXPIRED_OTP or OTP_EXPIRED"},
        404: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    summary="Delete a blog post",
    description="Pass the emailed code in the `X-OTP` header or the `otp` query parameter. A malformed id is rejected before the code is checked; a well-formed id with no post still consumes the code.",
)
async def delete_post(
    blog_id: str,
    otp: str | None = Query(None),
    x_otp: str | None = Header(None),
    verifier: CodeVerifier = Depends(get_code_verifier),
    db: AsyncSession = Depends(get_db),
):
    return await _verify_then_delete(blog_id, x_otp or otp, verifier, db)


@router.post(
    "/delete-confirm",
    response_model=MessageResponse,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="Delete a blog post (code in body)",
    description="Same as `DELETE /blogs/{id}` with `blog_id` and `otp` in the JSON body.",
)
async def delete_confirm(
    body: DeleteConfirmRequest,
    verifier: CodeVerifier = Depends(get_code_verifier),
    db: AsyncSession = Depends(get_db),
):
    return await _verify_then_delete(body.blog_id, body.otp, verifier, db)
