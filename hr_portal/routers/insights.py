from fastapi import APIRouter, Depends
import logging

from hr_portal.core.config import settings
from hr_portal.models.user import User
from hr_portal.routers.auth_deps import get_current_user, require_hr
from hr_portal.schemas.insights import (
    ChatRequest,
    ChatResponse,
    FAQEntry,
    FAQResponse,
    RetentionFactors,
    RetentionPrediction,
)
from hr_portal.services import chat_ai
from hr_portal.services.retention import predict_retention

logger = logging.getLogger(__name__)

router = APIRouter(tags=["insights"])


@router.post("/employee-retention/predict", response_model=RetentionPrediction)
def predict_employee_retention(
    factors: RetentionFactors,
    current_user: User = Depends(require_hr()),
):
    prediction = predict_retention(factors.model_dump())
    logger.info(f"Retention prediction: {prediction['risk_level']} ({prediction['risk_score']})")
    return prediction


@router.post("/chat", response_model=ChatResponse)
def chat(
    payload: ChatRequest,
    current_user: User = Depends(get_current_user),
):
    history = [m.model_dump() for m in payload.conversation_history]
    return chat_ai.answer_chat(
        payload.message,
        payload.context,
        history,
        max_history=settings.ai.max_history_messages,
    )


@router.get("/chat/faq", response_model=FAQResponse)
def chat_faq():
    return FAQResponse(faqs=[FAQEntry(**faq) for faq in chat_ai.hr_faq()])
