"""
Symptom-to-doctor matching.

Scores each available doctor against the patient's free-text symptoms and an
optional coarse category, then ranks them. Scores start at 0.5 and grow with
every matching signal; they are not normalized and can exceed 1.0 when several
symptom keywords point at the same specialization.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

BASE_SCORE = 0.5
NEUTRAL_SCORE = 1.0
CATEGORY_BONUS = 0.5
KEYWORD_BONUS = 0.3
EXPERIENCE_BONUS = 0.1
EXPERIENCE_THRESHOLD = 5
MAX_SURFACED_REASONS = 2

# Symptom keyword -> specializations that treat it
SYMPTOM_SPECIALIZATIONS: Dict[str, List[str]] = {
    "chest pain": ["Cardiology", "Emergency Medicine"],
    "heart": ["Cardiology"],
    "breathing": ["Pulmonology", "Emergency Medicine"],
    "cough": ["Pulmonology", "General Medicine"],
    "fever": ["General Medicine", "Internal Medicine"],
    "headache": ["Neurology", "General Medicine"],
    "migraine": ["Neurology"],
    "anxiety": ["Psychiatry", "Psychology"],
    "depression": ["Psychiatry", "Psychology"],
    "rash": ["Dermatology"],
    "skin": ["Dermatology"],
    "stomach": ["Gastroenterology"],
    "joint pain": ["Orthopedics", "Rheumatology"],
}


@dataclass
class DoctorMatch:
    doctor: Any
    score: float
    reasons: List[str] = field(default_factory=list)

    @property
    def top_reasons(self) -> List[str]:
        return self.reasons[:MAX_SURFACED_REASONS]


def _available_reason(specialization: str) -> str:
    return f"Available {specialization} specialist"


def score_doctor(doctor, symptoms: str, category: str) -> DoctorMatch:
    """Score a single doctor. Expects non-empty symptoms or category."""
    specialization = doctor.specialization or ""
    specialization_lower = specialization.lower()
    symptoms_lower = symptoms.lower()
    category = category.strip()

    score = BASE_SCORE
    reasons = []

    if category and category.lower() in specialization_lower:
        score += CATEGORY_BONUS
        reasons.append(f"Specializes in {category}")

    for keyword, specializations in SYMPTOM_SPECIALIZATIONS.items():
        if keyword not in symptoms_lower:
            continue
        if any(spec.lower() in specialization_lower for spec in specializations):
            score += KEYWORD_BONUS
            reasons.append(f"Expert in {keyword}-related conditions")

    experience = doctor.experience_years or 0
    if experience > EXPERIENCE_THRESHOLD:
        score += EXPERIENCE_BONUS
        reasons.append(f"{experience} years of experience")

    if not reasons:
        reasons.append(_available_reason(specialization))

    return DoctorMatch(doctor=doctor, score=round(score, 2), reasons=reasons)


def rank_doctors(symptoms: str, category: str, doctors: Iterable) -> List[DoctorMatch]:
    """
    Rank doctors for the given symptoms and category, best match first.

    When both inputs are blank every doctor gets the neutral score of 1.0.
    Equal scores keep the input order.
    """
    symptoms = symptoms or ""
    category = category or ""

    if not symptoms.strip() and not category.strip():
        return [
            DoctorMatch(
                doctor=doctor,
                score=NEUTRAL_SCORE,
                reasons=[_available_reason(doctor.specialization or "")],
            )
            for doctor in doctors
        ]

    matches = [score_doctor(doctor, symptoms, category) for doctor in doctors]
    # sorted() is stable, including with reverse=True
    return sorted(matches, key=lambda m: m.score, reverse=True)
