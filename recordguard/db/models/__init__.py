from recordguard.db.models.employee import Employee
from recordguard.db.models.medical_info import MedicalInfo
from recordguard.db.models.government_id import GovernmentID
from recordguard.db.models.employment_detail import EmploymentDetail

__all__ = ["Employee", "MedicalInfo", "GovernmentID", "EmploymentDetail"]
