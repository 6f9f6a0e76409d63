# Models/complaint_wizard.py
import os
import logging
from collections import OrderedDict
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from Connections.api_client import ApiError, ComplaintsApi
from Helpers.helpers import as_rating, blank_to_none
from Schemas.complaints_schema import (
    ComplaintSubmission, ContactStep, PersonalStep, ProblemStep, SuggestionStep
)
from Schemas.views_schema import STEP_TITLES, CaptchaOut, StepOut, WizardView

load_dotenv()

# Public reCAPTCHA site key; the secret half lives with the complaints API.
RECAPTCHA_SITE_KEY = os.getenv("RECAPTCHA_SITE_KEY", "6LfVwCosAAAAAASdHSh7gtx83nM70YyClIJ9OTJ5")
CLEAR_CAPTCHA_ON_FAILURE = os.getenv("CLEAR_CAPTCHA_ON_FAILURE", "false").lower() == "true"
WIZARD_MAX_VISITORS = int(os.getenv("WIZARD_MAX_VISITORS", "10000"))

logger = logging.getLogger(__name__)

FIRST_STEP, LAST_STEP = 1, 4
FIELDS = ("fullName", "branch", "problem", "solution", "contact", "rating")
OPTIONAL_TEXT = {"solution", "contact"}
STEP_MODELS = {1: PersonalStep, 2: ProblemStep, 3: SuggestionStep}

CAPTCHA_REQUIRED = "Пожалуйста, подтвердите, что вы не робот"
SUBMIT_FAILED = "Ошибка при отправке. Попробуйте еще раз."

# field -> pydantic error type -> message, "*" covers every other error type
FIELD_MESSAGES = {
    "fullName": {
        "string_too_short": "ФИО должно быть длиннее 2 символов",
        "string_too_long": "ФИО должно быть не длиннее 100 символов",
        "*": "ФИО должно быть длиннее 2 символов",
    },
    "branch": {"*": "Выберите филиал"},
    "problem": {
        "string_too_long": "Описание должно быть не длиннее 1000 символов",
        "*": "Опишите проблему подробнее (минимум 10 символов)",
    },
    "solution": {"*": "Предложение должно быть не длиннее 1000 символов"},
    "contact": {"*": "Некорректные контактные данные"},
    "rating": {"*": "Оценка должна быть от 1 до 5"},
    "captchaToken": {"*": CAPTCHA_REQUIRED},
}

BRANCH_PLACEHOLDERS = {
    "loading": "Загрузка...",
    "empty": "Нет филиалов",
    "ready": "Выберите филиал",
}


class WizardStateError(Exception):
    pass


class CaptchaRequired(Exception):
    pass


class SubmissionFailed(Exception):
    pass


def _messages(exc: ValidationError) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for err in exc.errors():
        field = str(err["loc"][0]) if err["loc"] else "*"
        if field in out:
            continue
        by_type = FIELD_MESSAGES.get(field, {})
        out[field] = by_type.get(err["type"]) or by_type.get("*") or err["msg"]
    return out


class ComplaintWizard:
    """
    Four-step complaint form.

    Steps 1 and 2 gate `next()` on their own fields; step 3 only bounds the
    suggestion length; step 4 collects contact, rating and the bot-verification
    token and is the only step that can submit.
    """

    def __init__(self):
        self.step = FIRST_STEP
        self.submitted = False
        self.submitting = False
        self.values: Dict[str, Any] = {}
        self.errors: Dict[str, str] = {}
        self.branches: List[str] = []
        self.branches_status = "loading"
        self.captcha_token: Optional[str] = None

    async def load_branches(self, api: ComplaintsApi):
        self.branches_status = "loading"
        try:
            branches = await api.list_branches()
        except (ApiError, ValidationError):
            logger.exception("Failed to fetch branches")
            branches = []
        self.branches = [b.name for b in branches]
        self.branches_status = "ready" if self.branches else "empty"

    # ---------- Fields ----------
    def update(self, **fields):
        if self.submitted:
            raise WizardStateError("Форма уже отправлена")
        for name, value in fields.items():
            if name not in FIELDS:
                raise WizardStateError(f"Неизвестное поле: {name}")
            if name == "rating":
                value = as_rating(value)
            elif name in OPTIONAL_TEXT:
                value = blank_to_none(value)
            if value is None:
                self.values.pop(name, None)
            else:
                self.values[name] = value
            self.errors.pop(name, None)

    def _validate(self, model, extra: Optional[Dict[str, Any]] = None):
        try:
            return model.model_validate({**self.values, **(extra or {})}), {}
        except ValidationError as e:
            return None, _messages(e)

    # ---------- Navigation ----------
    def next(self) -> bool:
        if self.submitted:
            raise WizardStateError("Форма уже отправлена")
        if self.step >= LAST_STEP:
            raise WizardStateError("Это последний шаг")
        _, errors = self._validate(STEP_MODELS[self.step])
        self.errors = errors
        if errors:
            return False
        self.step += 1
        return True

    def back(self) -> bool:
        if self.submitted or self.step == FIRST_STEP:
            return False
        self.step -= 1
        return True

    # ---------- Bot verification ----------
    def set_captcha(self, token: Optional[str]):
        self.captcha_token = token or None

    def expire_captcha(self):
        self.captcha_token = None

    @property
    def can_submit(self) -> bool:
        return (
                self.step == LAST_STEP
                and not self.submitted
                and not self.submitting
                and bool(self.captcha_token)
        )

    # ---------- Submission ----------
    async def submit(self, api: ComplaintsApi) -> bool:
        if self.submitted or self.step != LAST_STEP:
            raise WizardStateError("Отправка возможна только на последнем шаге")
        if self.submitting:
            raise WizardStateError("Форма уже отправляется")
        if not self.captcha_token:
            raise CaptchaRequired(CAPTCHA_REQUIRED)

        submission, errors = self._validate(ComplaintSubmission, {"captchaToken": self.captcha_token})
        self.errors = errors
        if errors:
            return False

        self.submitting = True
        try:
            await api.create_complaint(submission)
        except ApiError as e:
            logger.error("Complaint submission failed: %s", e.message)
            if CLEAR_CAPTCHA_ON_FAILURE:
                self.captcha_token = None
            raise SubmissionFailed(SUBMIT_FAILED) from e
        finally:
            self.submitting = False

        self.submitted = True
        logger.info("Complaint submitted for branch %s", submission.branch)
        return True

    def reset(self):
        self.step = FIRST_STEP
        self.submitted = False
        self.values = {}
        self.errors = {}
        self.captcha_token = None

    # ---------- View ----------
    def view(self) -> WizardView:
        return WizardView(
            step=self.step,
            steps=[
                StepOut(number=i, title=title, is_active=self.step == i, is_completed=self.step > i)
                for i, title in enumerate(STEP_TITLES, start=FIRST_STEP)
            ],
            submitted=self.submitted,
            submitting=self.submitting,
            values={name: self.values.get(name) for name in FIELDS},
            errors=self.errors,
            branches=self.branches,
            branches_status=self.branches_status,
            branch_placeholder=BRANCH_PLACEHOLDERS[self.branches_status],
            captcha=CaptchaOut(site_key=RECAPTCHA_SITE_KEY, verified=bool(self.captcha_token)),
            can_go_back=not self.submitted and self.step > FIRST_STEP,
            can_go_next=not self.submitted and self.step < LAST_STEP,
            can_submit=self.can_submit,
        )


class WizardRegistry:
    """One wizard per visitor, oldest visitors evicted past `max_visitors`."""

    def __init__(self, max_visitors: int = WIZARD_MAX_VISITORS):
        self.max_visitors = max_visitors
        self._wizards: "OrderedDict[str, ComplaintWizard]" = OrderedDict()

    def get(self, visitor_id: Optional[str]) -> Optional[ComplaintWizard]:
        if not visitor_id:
            return None
        wizard = self._wizards.get(visitor_id)
        if wizard is not None:
            self._wizards.move_to_end(visitor_id)
        return wizard

    def add(self, visitor_id: str, wizard: ComplaintWizard):
        self._wizards[visitor_id] = wizard
        self._wizards.move_to_end(visitor_id)
        while len(self._wizards) > self.max_visitors:
            evicted, _ = self._wizards.popitem(last=False)
            logger.debug("Evicted wizard of visitor %s", evicted)

    def __len__(self):
        return len(self._wizards)
