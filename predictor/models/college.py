from sqlalchemy import Column, Integer, String, Float, Text
from sqlalchemy.orm import relationship

from .base import Base


class PredCollege(Base):
    __tablename__ = "pred_colleges"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)

    # Admission routing
    track = Column(String, nullable=False, index=True)
    exam_accepted = Column(String, nullable=False, index=True)

    # Location & type
    location = Column(String)
    city = Column(String)
    state = Column(String, index=True)
    institution_type = Column(String)  # government/private/deemed
    college_type = Column(String)      # IIT/NIT/IIIT/Medical/Law/Management/Arts/Other
    accreditation = Column(String)

    # Fees (per year)
    tuition_fee_per_year = Column(Float)
    hostel_fee_per_year = Column(Float)
    program_years = Column(Integer)

    # Outcomes
    placement_rate = Column(Float)
    average_package = Column(Float)
    median_package = Column(Float)
    highest_package = Column(Float)

    # Aggregate cutoff text for colleges without branches
    closing_rank = Column(String)
    closing_percentile = Column(String)
    notes = Column(Text)

    branches = relationship(
        "PredBranch",
        back_populates="college",
        lazy="selectin",
        order_by="PredBranch.id",
    )
    cutoffs = relationship(
        "PredCutoff",
        back_populates="college",
        lazy="selectin",
        order_by="PredCutoff.id",
    )
