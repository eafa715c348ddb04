from sqlalchemy import Column, Integer, String, Float, ForeignKey
from sqlalchemy.orm import relationship

from .base import Base


class PredCutoff(Base):
    __tablename__ = "pred_cutoffs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    college_id = Column(String, ForeignKey("pred_colleges.id"), nullable=False, index=True)
    exam = Column(String, nullable=False)
    category = Column(String)  # None applies to every category
    quota = Column(String, default="All India")  # All India / State
    state = Column(String)
    opening = Column(Float, nullable=False)
    closing = Column(Float, nullable=False)

    college = relationship("PredCollege", back_populates="cutoffs")
