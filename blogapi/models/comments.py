import uuid
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from . import Base

class Comment(Base):
    __tablename__ = 'comments'
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    content = Column(Text, nullable=False)
    author_id = Column(String(64), ForeignKey('users.id'), index=True, nullable=False)
    post_id = Column(String(36), ForeignKey('posts.id'), index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    author = relationship('User', back_populates='comments')
    post = relationship('Post', back_populates='comments')
