from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from teamboard.database import get_db
from teamboard.errors import NotFound
from teamboard.models.task import Tag
from teamboard.models.user import User
from teamboard.schemas.tag import TagCreate, TagUpdate, TagOut
from teamboard.utils.auth import get_current_user

router = APIRouter(prefix="/tags", tags=["Tags"])


def _get_tag_or_404(db: Session, tag_id: int) -> Tag:
    tag = db.query(Tag).filter(Tag.id == tag_id).first()
    if not tag:
        raise NotFound("Tag", tag_id)
    return tag


@router.post("/", response_model=TagOut, status_code=status.HTTP_201_CREATED)
def create_tag(tag_data: TagCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    tag = Tag(name=tag_data.name, color=tag_data.color)
    db.add(tag)
    db.commit()
    db.refresh(tag)
    return tag


@router.get("/", response_model=List[TagOut])
def get_all_tags(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return db.query(Tag).order_by(Tag.name.asc()).all()


@router.get("/{tag_id}", response_model=TagOut)
def get_tag(tag_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _get_tag_or_404(db, tag_id)


@router.put("/{tag_id}", response_model=TagOut)
def update_tag(
    tag_id: int,
    tag_update: TagUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    tag = _get_tag_or_404(db, tag_id)
    for field, value in tag_update.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(tag, field, value)
    db.commit()
    db.refresh(tag)
    return tag


@router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tag(tag_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Delete a tag; tasks keep existing without it"""
    tag = _get_tag_or_404(db, tag_id)
    db.delete(tag)
    db.commit()
    return None
