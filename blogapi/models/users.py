from sqlalchemy import Column, String, DateTime, func
from sqlalchemy.orm import relationship
from . import Base

class User(Base):
    __tablename__ = 'users'
    # same value as the identity provider's user id, never generated here
    id = Column(String(64), primary_key=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    posts = relationship('Post', back_populates='author', order_by='Post.created_at')
    comments = relationship('Comment', back_populates='author', order_by='Comment.created_at')
