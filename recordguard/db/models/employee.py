# recordguard/db/models/employee.py
from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
from recordguard.db.base import BaseModel


class Employee(BaseModel):
    """Employee master record. Holds no encrypted columns itself."""
    __tablename__ = "employees"

    employee_id = Column(String(50), primary_key=True)  # e.g. 2026-0001
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True, unique=True)

    # Relationships
    medical_info = relationship("MedicalInfo", back_populates="employee", uselist=False)
    government_id = relationship("GovernmentID", back_populates="employee", uselist=False)
    employment_detail = relationship("EmploymentDetail", back_populates="employee", uselist=False)
