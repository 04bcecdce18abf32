# recordguard/db/models/medical_info.py
from sqlalchemy import Column, String, Text, ForeignKey
from sqlalchemy.orm import relationship
import uuid
from recordguard.db.base import BaseModel


class MedicalInfo(BaseModel):
    """Medical information. Sensitive columns hold envelopes (purpose "medical")."""
    __tablename__ = "medical_info"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    employee_id = Column(String(50), ForeignKey("employees.employee_id"), nullable=False, unique=True, index=True)

    # Encrypted
    medical_notes = Column(Text, nullable=True)
    allergies = Column(Text, nullable=True)
    disability_details = Column(Text, nullable=True)
    pwd_id_number = Column(Text, nullable=True)
    health_insurance_number = Column(Text, nullable=True)
    physician_contact = Column(Text, nullable=True)
    emergency_procedures = Column(Text, nullable=True)
    blood_type = Column(Text, nullable=True)
    accommodations_needed = Column(Text, nullable=True)
    emergency_protocol = Column(Text, nullable=True)
    disability_certification = Column(Text, nullable=True)
    assistive_technology = Column(Text, nullable=True)
    mobility_aids = Column(Text, nullable=True)
    communication_needs = Column(Text, nullable=True)
    workplace_modifications = Column(Text, nullable=True)

    # Plain
    has_disability = Column(String(10), nullable=True)
    disability_type = Column(String(100), nullable=True)

    employee = relationship("Employee", back_populates="medical_info")
