from typing import Dict, List
from datetime import datetime, timezone
import logging

from hr_portal.core.config import settings
from hr_portal.services.openrouter_client import call_openrouter

logger = logging.getLogger(__name__)

SYSTEM_PROMPTS = {
    "hr": (
        "You are a helpful HR assistant. Provide professional, accurate, and helpful responses about "
        "HR-related topics including employee policies, benefits, leave management, performance reviews, "
        "and general workplace questions. Keep responses concise and actionable."
    ),
    "general": "You are a helpful AI assistant. Provide accurate, helpful, and professional responses to user queries.",
    "technical": "You are a technical assistant specializing in HR technology, systems, and processes.",
}


def _allotment_answer() -> str:
    days = settings.leave.default_allotments
    return (
        f"Every employee starts the year with {days['casual']:g} casual, {days['sick']:g} sick "
        f"and {days['earned']:g} earned days. Maternity ({days['maternity']:g} days) and "
        f"paternity ({days['paternity']:g} days) leave are tracked separately."
    )


def hr_faq() -> List[Dict]:
    """FAQ entries; the allotment answer follows the configured leave policy."""
    return [
        {
            "id": 1,
            "question": "How do I apply for leave?",
            "answer": "Open the Leaves section of the employee portal, pick the leave type and dates, "
                      "and submit the request for manager approval.",
        },
        {
            "id": 2,
            "question": "How many leave days do I get each year?",
            "answer": _allotment_answer(),
        },
        {
            "id": 3,
            "question": "Can I cancel a leave request?",
            "answer": "Yes, as long as it is still pending. Approved or rejected requests can only be changed by HR.",
        },
        {
            "id": 4,
            "question": "How do I update my personal information?",
            "answer": "Use the My Profile page to update your name and phone number. Other changes go through HR.",
        },
        {
            "id": 5,
            "question": "How do I report time and attendance?",
            "answer": "Use clock-in and clock-out in the attendance section at the start and end of each working day.",
        },
    ]


def build_messages(message: str, context: str, history: List[Dict[str, str]], max_history: int) -> List[Dict[str, str]]:
    system_prompt = SYSTEM_PROMPTS.get(context, SYSTEM_PROMPTS["general"])
    messages = [{"role": "system", "content": system_prompt}]
    # Only the most recent turns are forwarded
    if max_history > 0:
        messages.extend(history[-max_history:])
    messages.append({"role": "user", "content": message})
    return messages


def answer_chat(message: str, context: str, history: List[Dict[str, str]], max_history: int = 10) -> Dict[str, str]:
    messages = build_messages(message, context, history, max_history)
    logger.info(f"Chat request | context={context} history={len(messages) - 2}")
    reply = call_openrouter(messages, temperature=settings.ai.temperature)
    return {
        "response": reply,
        "context": context,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
