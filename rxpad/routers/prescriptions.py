from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse

from rxpad.core.deps import get_share_target, get_store
from rxpad.core.errors import FormValidationError, RecordNotFound, ShareError
from rxpad.core.kv_store import KeyValueStore
from rxpad.schemas.prescription import (
    ExportOut,
    PrescriptionForm,
    PrescriptionRequest,
    ShareOut,
    ShareRequest,
)
from rxpad.services import patient_registry, preset_registry
from rxpad.services import prescription_form as form_ops
from rxpad.services.pdf_prescription import (
    export_prescription,
    generate_prescription_pdf,
    prescription_filename,
)
from rxpad.services.share_service import ShareTarget, share_prescription

router = APIRouter(prefix="/prescriptions", tags=["prescriptions"])


def _build_form(payload: PrescriptionRequest, store: KeyValueStore) -> PrescriptionForm:
    """Apply the request to a blank form the same way the create-script screen does."""
    form = form_ops.clear_form()
    if payload.date:
        form = form_ops.set_date(form, payload.date)
    form = form_ops.set_age(form, payload.age)
    try:
        if payload.custom_patient_name is not None:
            form = form_ops.use_custom_patient(form, payload.custom_patient_name)
        elif payload.patient_id is not None:
            form = form_ops.select_patient(form, patient_registry.get_patient(store, payload.patient_id))
        if payload.custom_prescription is not None:
            form = form_ops.use_custom_prescription(form, payload.custom_prescription)
        elif payload.preset_id is not None:
            form = form_ops.select_preset(form, preset_registry.get_preset(store, payload.preset_id))
    except RecordNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if payload.icd10_codes is not None:
        form = form_ops.set_icd10_codes(form, payload.icd10_codes)
    form = form_ops.set_repeats(form, payload.repeats)
    try:
        form_ops.validate_form(form)
    except FormValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return form


@router.post("/preview")
def preview_prescription(payload: PrescriptionRequest, store: KeyValueStore = Depends(get_store)):
    form = _build_form(payload, store)
    pdf = generate_prescription_pdf(form)
    filename = prescription_filename(form)
    return StreamingResponse(
        pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )


@router.post("/export", response_model=ExportOut, status_code=status.HTTP_201_CREATED)
def export(payload: PrescriptionRequest, store: KeyValueStore = Depends(get_store)):
    form = _build_form(payload, store)
    path = export_prescription(form)
    return ExportOut(path=str(path), filename=path.name)


@router.post("/share", response_model=ShareOut)
def share(
    payload: ShareRequest,
    store: KeyValueStore = Depends(get_store),
    target: ShareTarget = Depends(get_share_target),
):
    form = _build_form(payload, store)
    path = export_prescription(form)
    try:
        msg = share_prescription(path, form, target, channel=payload.channel)
    except ShareError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
    return ShareOut(path=str(path), filename=path.name, channel=msg.channel, title=msg.title, message=msg.message)
