from sqlalchemy import Column, Integer, String, Float, ForeignKey
from sqlalchemy.orm import relationship

from .base import Base


class PredBranch(Base):
    __tablename__ = "pred_branches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    college_id = Column(String, ForeignKey("pred_colleges.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    closing_min = Column(Float, nullable=False)
    closing_max = Column(Float, nullable=False)

    college = relationship("PredCollege", back_populates="branches")
