from typing import Any
from wenlock.schemas.common import CamelModel


class EhrSyncRequest(CamelModel):
    patient_id: str
    data: dict[str, Any] = {}


class EhrSyncResponse(CamelModel):
    status: str
    message: str
    ehr_record_id: str


class LabResult(CamelModel):
    test_name: str
    value: str
    status: str
    date: str
