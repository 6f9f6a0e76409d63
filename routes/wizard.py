# routes/wizard.py
import uuid

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from Connections.api_client import ComplaintsApi, get_api
from Models.complaint_wizard import (
    CaptchaRequired, ComplaintWizard, SubmissionFailed, WizardRegistry, WizardStateError
)
from Schemas.complaints_schema import CaptchaIn, WizardFieldsIn
from Schemas.views_schema import WizardView

router = APIRouter()

WIZARD_COOKIE = "wizard_id"


async def get_wizard(
        request: Request,
        response: Response,
        api: ComplaintsApi = Depends(get_api),
) -> ComplaintWizard:
    registry: WizardRegistry = request.app.state.wizards
    visitor_id = request.cookies.get(WIZARD_COOKIE)
    wizard = registry.get(visitor_id)
    if wizard is None:
        # first visit (or evicted): new form, branch list fetched once
        visitor_id = uuid.uuid4().hex
        wizard = ComplaintWizard()
        registry.add(visitor_id, wizard)
        await wizard.load_branches(api)
    response.set_cookie(WIZARD_COOKIE, visitor_id, httponly=True, samesite="lax")
    return wizard


# ---------- Form ----------
@router.get("", response_model=WizardView)
def show(wizard: ComplaintWizard = Depends(get_wizard)):
    return wizard.view()


@router.put("/fields", response_model=WizardView)
def update_fields(body: WizardFieldsIn, wizard: ComplaintWizard = Depends(get_wizard)):
    try:
        wizard.update(**body.model_dump(by_alias=True, exclude_unset=True))
    except WizardStateError as e:
        raise HTTPException(status.HTTP_409_CONFLICT, str(e))
    return wizard.view()


# ---------- Steps ----------
@router.post("/next", response_model=WizardView)
def next_step(wizard: ComplaintWizard = Depends(get_wizard)):
    try:
        wizard.next()
    except WizardStateError as e:
        raise HTTPException(status.HTTP_409_CONFLICT, str(e))
    return wizard.view()


@router.post("/back", response_model=WizardView)
def previous_step(wizard: ComplaintWizard = Depends(get_wizard)):
    wizard.back()
    return wizard.view()


# ---------- Bot verification ----------
@router.post("/captcha", response_model=WizardView)
def verify(body: CaptchaIn, wizard: ComplaintWizard = Depends(get_wizard)):
    wizard.set_captcha(body.token)
    return wizard.view()


@router.delete("/captcha", response_model=WizardView)
def expire(wizard: ComplaintWizard = Depends(get_wizard)):
    wizard.expire_captcha()
    return wizard.view()


# ---------- Submission ----------
@router.post("/submit", response_model=WizardView)
async def submit(
        wizard: ComplaintWizard = Depends(get_wizard),
        api: ComplaintsApi = Depends(get_api),
):
    try:
        await wizard.submit(api)
    except CaptchaRequired as e:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, str(e))
    except WizardStateError as e:
        raise HTTPException(status.HTTP_409_CONFLICT, str(e))
    except SubmissionFailed as e:
        raise HTTPException(status.HTTP_502_BAD_GATEWAY, str(e))
    return wizard.view()


@router.post("/reset", response_model=WizardView)
def reset(wizard: ComplaintWizard = Depends(get_wizard)):
    wizard.reset()
    return wizard.view()
