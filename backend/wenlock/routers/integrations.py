from fastapi import APIRouter, Depends, Request

from wenlock.auth import authorize
from wenlock.container import Services, get_services
from wenlock.models.user import User
from wenlock.schemas.integration import EhrSyncRequest, EhrSyncResponse, LabResult
from wenlock.services.audit_service import RequestMeta

router = APIRouter()


@router.post("/ehr/sync-patient", response_model=EhrSyncResponse)
async def sync_ehr_patient(
    body: EhrSyncRequest,
    request: Request,
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("integration.ehr_sync")),
):
    return await services.integrations.sync_ehr_patient(
        body.patient_id, body.data, current_user, RequestMeta.from_request(request)
    )


@router.get("/lab/results/{patient_id}", response_model=list[LabResult])
async def lab_results(
    patient_id: str,
    request: Request,
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("integration.lab_results")),
):
    return await services.integrations.fetch_lab_results(patient_id, current_user, RequestMeta.from_request(request))
