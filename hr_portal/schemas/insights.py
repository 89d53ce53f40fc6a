from pydantic import BaseModel, Field
from typing import Dict, List, Literal

class RetentionFactors(BaseModel):
    job_satisfaction: float = Field(ge=0, le=10)
    engagement_level: float = Field(ge=0, le=10)
    tenure: float = Field(ge=0, description="Years with the company")
    work_life_balance: float = Field(ge=0, le=10)
    salary_satisfaction: float = Field(ge=0, le=10)
    career_growth: float = Field(ge=0, le=10)
    manager_relationship: float = Field(ge=0, le=10)
    performance_score: float = Field(ge=0, le=10)

class RetentionPrediction(BaseModel):
    risk_level: Literal["Low", "Medium", "High"]
    risk_score: int
    retention_probability: float
    recommendations: List[str]

class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str

class ChatRequest(BaseModel):
    message: str = Field(min_length=1, max_length=4000)
    context: str = "hr"
    conversation_history: List[ChatMessage] = []

class ChatResponse(BaseModel):
    response: str
    context: str
    timestamp: str

class FAQEntry(BaseModel):
    id: int
    question: str
    answer: str

class FAQResponse(BaseModel):
    faqs: List[FAQEntry]
