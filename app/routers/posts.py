from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import Requester, get_requester
from app.database import get_db
from app.dependencies import PostListParams
from app.schemas import PostCreate, PostListResponse, PostResponse, PostUpdate
from app.services import post_service

router = APIRouter(prefix="/api/post", tags=["posts"])

@router.post("/create", status_code=201, response_model=PostResponse)
async def create_post(
    data: PostCreate,
    requester: Requester | None = Depends(get_requester),
    db: AsyncSession = Depends(get_db),
):
    return await post_service.create_post(db, data, requester)

@router.get("/getPosts", response_model=PostListResponse)
async def get_posts(
    params: PostListParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await post_service.get_posts(db, **params.as_kwargs())

@router.delete("/deletepost/{post_id}", response_model=str)
async def delete_post(
    post_id: int,
    requester: Requester | None = Depends(get_requester),
    db: AsyncSession = Depends(get_db),
):
    return await post_service.delete_post(db, post_id, requester)

@router.put("/updatepost/{post_id}/{user_id}", response_model=PostResponse)
async def update_post(
    post_id: int,
    user_id: str,
    data: PostUpdate,
    requester: Requester | None = Depends(get_requester),
    db: AsyncSession = Depends(get_db),
):
    return await post_service.update_post(db, post_id, user_id, data, requester)

@router.post("/viewpost/{post_id}", response_model=PostResponse)
async def view_post(
    post_id: int,
    requester: Requester | None = Depends(get_requester),
    db: AsyncSession = Depends(get_db),
):
    return await post_service.record_view(db, post_id, requester)
