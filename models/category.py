from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from database.base import Base

class Category(Base):
    __tablename__ = "menu_categories"
    
    id = Column(Integer, primary_key=True)
    cafe_id = Column(Integer, ForeignKey("cafes.id"), nullable=False)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    
    cafe = relationship("Cafe", back_populates="categories")
    items = relationship("MenuItem", back_populates="category", order_by="MenuItem.sort_order")
    
    # not unique: concurrent creators may share an ordinal until renumbered
    __table_args__ = (
        Index('idx_category_cafe_order', 'cafe_id', 'sort_order'),
    )
