"""
Rule-based employee retention scoring.

Each factor adds a fixed penalty to a risk score. Survey-style factors are on a
0-10 scale where lower is worse; tenure is in years.
"""
from typing import Any, Dict, List

HIGH_RISK_THRESHOLD = 60
MEDIUM_RISK_THRESHOLD = 30


def _tiered(value: float, tiers) -> int:
    for ceiling, penalty in tiers:
        if value <= ceiling:
            return penalty
    return 0


def _tenure_penalty(tenure: float) -> int:
    if tenure < 1:
        return 20
    if tenure < 2:
        return 10
    if tenure > 5:
        return 5
    return 0


def calculate_risk_score(factors: Dict[str, float]) -> int:
    score = 0
    score += _tiered(factors["job_satisfaction"], [(3, 30), (6, 15), (8, 5)])
    score += _tiered(factors["engagement_level"], [(3, 25), (6, 12), (8, 3)])
    score += _tenure_penalty(factors["tenure"])
    score += _tiered(factors["work_life_balance"], [(3, 15), (6, 8)])
    score += _tiered(factors["salary_satisfaction"], [(3, 20), (6, 10)])
    score += _tiered(factors["career_growth"], [(3, 15), (6, 7)])
    score += _tiered(factors["manager_relationship"], [(3, 12), (6, 6)])
    score += _tiered(factors["performance_score"], [(3, 10)])
    return score


def risk_level_for(score: int) -> str:
    if score >= HIGH_RISK_THRESHOLD:
        return "High"
    if score >= MEDIUM_RISK_THRESHOLD:
        return "Medium"
    return "Low"


def generate_recommendations(risk_level: str, factors: Dict[str, float]) -> List[str]:
    recommendations = []
    if factors["job_satisfaction"] <= 5:
        recommendations.append("Schedule one-on-one meetings to discuss job satisfaction")
    if factors["career_growth"] <= 5:
        recommendations.append("Provide career development opportunities and training")
    if factors["work_life_balance"] <= 5:
        recommendations.append("Review workload and consider flexible working arrangements")
    if factors["salary_satisfaction"] <= 5:
        recommendations.append("Review compensation package and benefits")
    if factors["manager_relationship"] <= 5:
        recommendations.append("Manager training on employee engagement and communication")
    if risk_level == "High":
        recommendations.append("Immediate retention intervention required")
        recommendations.append("Consider retention bonus or promotion opportunities")
    return recommendations


def predict_retention(factors: Dict[str, float]) -> Dict[str, Any]:
    score = calculate_risk_score(factors)
    level = risk_level_for(score)
    return {
        "risk_level": level,
        "risk_score": score,
        "retention_probability": max(0, min(100, 100 - score)),
        "recommendations": generate_recommendations(level, factors),
    }
