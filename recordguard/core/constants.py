# recordguard/core/constants.py
from enum import Enum
from typing import Dict, Tuple


class Purpose(str, Enum):
    """Key-derivation purposes, one per data category"""
    DEFAULT = "default"
    MEDICAL = "medical"
    GOVERNMENT = "government"
    SALARY = "salary"


class RecordFamily(str, Enum):
    MEDICAL = "medical"
    GOVERNMENT = "government"
    SALARY = "salary"


MEDICAL_ENCRYPTED_FIELDS: Tuple[str, ...] = (
    "medical_notes",
    "allergies",
    "disability_details",
    "pwd_id_number",
    "health_insurance_number",
    "physician_contact",
    "emergency_procedures",
    "blood_type",
    "accommodations_needed",
    "emergency_protocol",
    "disability_certification",
    "assistive_technology",
    "mobility_aids",
    "communication_needs",
    "workplace_modifications",
)

GOVERNMENT_ID_ENCRYPTED_FIELDS: Tuple[str, ...] = (
    "sss_number",
    "tin_number",
    "philhealth_number",
    "pagibig_number",
    "gsis_number",
    "prc_license_number",
    "bir_number",
    "passport_number",
)

SALARY_ENCRYPTED_FIELDS: Tuple[str, ...] = (
    "salary_amount",
    "salary_grade",
)


# Family -> (purpose, fields)
SENSITIVE_FIELDS: Dict[str, Tuple[str, Tuple[str, ...]]] = {
    RecordFamily.MEDICAL.value: (Purpose.MEDICAL.value, MEDICAL_ENCRYPTED_FIELDS),
    RecordFamily.GOVERNMENT.value: (Purpose.GOVERNMENT.value, GOVERNMENT_ID_ENCRYPTED_FIELDS),
    RecordFamily.SALARY.value: (Purpose.SALARY.value, SALARY_ENCRYPTED_FIELDS),
}
