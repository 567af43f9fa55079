from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session
from typing import List
import logging

from campusqa.api.v1.deps import get_current_user_id
from campusqa.core.database import get_db
from campusqa.schemas.forum import PostCreate, PostResponse, VoteRequest, VoteResponse
from campusqa.services.approval_service import ApprovalPromoter, get_approval_promoter
from campusqa.services.post_service import PostService
from campusqa.services.vote_service import VoteService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def create_post(
    payload: PostCreate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Create a post, question or answer"""
    post = PostService(db).create_post(
        author_id=user_id,
        content=payload.content,
        post_type=payload.type,
        parent_id=payload.parent_id,
    )
    return PostResponse.from_post(post)


@router.get("", response_model=List[PostResponse])
def list_pending_posts(limit: int = 50, db: Session = Depends(get_db)):
    """Pending feed, newest first"""
    posts = PostService(db).list_pending_posts(limit=min(max(limit, 1), 200))
    return [PostResponse.from_post(p) for p in posts]


@router.get("/{post_id}", response_model=PostResponse)
def get_post(post_id: int, db: Session = Depends(get_db)):
    return PostResponse.from_post(PostService(db).get_post(post_id))


@router.get("/{post_id}/answers", response_model=List[PostResponse])
def list_answers(post_id: int, db: Session = Depends(get_db)):
    return [PostResponse.from_post(p) for p in PostService(db).list_answers(post_id)]


@router.post("/{post_id}/vote", response_model=VoteResponse)
def vote_on_post(
    post_id: int,
    payload: VoteRequest,
    background_tasks: BackgroundTasks,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    promoter: ApprovalPromoter = Depends(get_approval_promoter)
):
    """
    Cast, retract or switch a vote. When the vote approves an answer the
    knowledge promotion runs after the response has been sent.
    """
    result = VoteService(db).apply_vote(user_id=user_id, post_id=post_id, value=payload.vote)

    if result.promotion is not None:
        logger.info(f"Scheduling promotion of answer {result.promotion.answer_id}")
        background_tasks.add_task(
            promoter.promote,
            result.promotion.answer_id,
            result.promotion.question_id,
        )

    return VoteResponse(vote_count=result.vote_count, status=result.status)
