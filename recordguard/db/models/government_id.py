# recordguard/db/models/government_id.py
from sqlalchemy import Column, String, Text, ForeignKey
from sqlalchemy.orm import relationship
import uuid
from recordguard.db.base import BaseModel


class GovernmentID(BaseModel):
    """Government ID numbers. All number columns hold envelopes (purpose "government")."""
    __tablename__ = "government_ids"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    employee_id = Column(String(50), ForeignKey("employees.employee_id"), nullable=False, unique=True, index=True)

    sss_number = Column(Text, nullable=True)
    tin_number = Column(Text, nullable=True)
    philhealth_number = Column(Text, nullable=True)
    pagibig_number = Column(Text, nullable=True)
    gsis_number = Column(Text, nullable=True)
    prc_license_number = Column(Text, nullable=True)
    bir_number = Column(Text, nullable=True)
    passport_number = Column(Text, nullable=True)

    employee = relationship("Employee", back_populates="government_id")
