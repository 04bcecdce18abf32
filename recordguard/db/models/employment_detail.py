# recordguard/db/models/employment_detail.py
from sqlalchemy import Column, String, Text, ForeignKey, Date
from sqlalchemy.orm import relationship
import uuid
from recordguard.db.base import BaseModel


class EmploymentDetail(BaseModel):
    """Employment terms. Salary columns hold envelopes (purpose "salary")."""
    __tablename__ = "employment_details"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    employee_id = Column(String(50), ForeignKey("employees.employee_id"), nullable=False, unique=True, index=True)

    position = Column(String(255), nullable=True)
    employment_status = Column(String(50), nullable=True)
    hire_date = Column(Date, nullable=True)

    # Encrypted. Stored as text so the envelope fits where a decimal used to live.
    salary_amount = Column(Text, nullable=True)
    salary_grade = Column(Text, nullable=True)

    employee = relationship("Employee", back_populates="employment_detail")
