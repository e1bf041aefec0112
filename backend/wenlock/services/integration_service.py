import logging
import time

from wenlock.enums import AuditAction, ResourceType
from wenlock.exceptions import NotFoundError
from wenlock.models._time import utcnow
from wenlock.models.user import User
from wenlock.schemas.integration import EhrSyncResponse, LabResult
from wenlock.services.audit_service import RequestMeta
from wenlock.services.base import AuditedService

logger = logging.getLogger(__name__)

# Patient id the mock lab treats as having no results.
FAILING_PATIENT_ID = "PAT-FAIL"


class MockIntegrationService(AuditedService):
    """Stand-ins for the external EHR and lab systems."""

    async def sync_ehr_patient(self, patient_id: str, data: dict, actor: User, meta: RequestMeta = None) -> EhrSyncResponse:
        logger.info("Simulating EHR patient sync for %s (%d fields)", patient_id, len(data))
        response = EhrSyncResponse(
            status="success",
            message=f"Patient data for {patient_id} synchronized with mock EHR.",
            ehr_record_id=f"EHR-{int(time.time() * 1000)}",
        )
        await self._audit(
            actor, AuditAction.INTEGRATION_SYNC,
            f"Simulated EHR patient data sync for patient ID: {patient_id}",
            resource_type=ResourceType.INTEGRATION, meta=meta,
        )
        return response

    async def fetch_lab_results(self, patient_id: str, actor: User, meta: RequestMeta = None) -> list[LabResult]:
        if patient_id == FAILING_PATIENT_ID:
            raise NotFoundError("Mock Lab Results not found for this patient ID")

        fetched_at = utcnow().isoformat()
        results = [
            LabResult(test_name="Blood Glucose", value="95 mg/dL", status="Normal", date=fetched_at),
            LabResult(test_name="CBC", value="WBC 7.5, RBC 4.8", status="Normal", date=fetched_at),
        ]
        await self._audit(
            actor, AuditAction.INTEGRATION_FETCH,
            f"Simulated lab results fetch for patient ID: {patient_id}",
            resource_type=ResourceType.INTEGRATION, meta=meta,
        )
        return results
