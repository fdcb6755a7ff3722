from typing import Dict, List

MENTAL_HEALTH_TIPS = [
    {"title": "Anxiety Management", "description": "Practice deep breathing exercises for 5-10 minutes daily"},
    {"title": "Stress Reduction", "description": "Try meditation apps or mindfulness techniques before sleep"},
    {"title": "Physical Activity", "description": "Light exercise like walking can significantly reduce anxiety levels"},
]

HEART_TIPS = [
    {"title": "Heart Health", "description": "Monitor your blood pressure and avoid excessive caffeine"},
    {
        "title": "Gentle Exercise",
        "description": "Light walking is beneficial, but avoid strenuous activities until cleared by doctor",
    },
    {
        "title": "Emergency Signs",
        "description": "Seek immediate help if you experience severe chest pain, shortness of breath, or dizziness",
    },
]

FEVER_TIPS = [
    {"title": "Rest & Recovery", "description": "Get plenty of rest and sleep to help your body fight the infection"},
    {"title": "Hydration", "description": "Drink warm liquids like herbal tea, soup, or warm water with honey"},
    {
        "title": "Symptom Monitoring",
        "description": "Monitor temperature and contact doctor if fever exceeds 101°F (38.3°C)",
    },
]

GENERAL_TIPS = [
    {"title": "Stay Hydrated", "description": "Drink at least 8 glasses of water daily to maintain optimal health"},
    {"title": "Regular Exercise", "description": "Aim for 30 minutes of moderate exercise daily to boost immunity"},
    {"title": "Quality Sleep", "description": "Get 7-9 hours of quality sleep each night for better health"},
]


def get_health_tips(symptoms: str = "", category: str = "") -> Dict[str, List[Dict[str, str]]]:
    """Pick a tip group from the symptoms, checked in priority order."""
    symptoms_lower = (symptoms or "").lower()
    category_lower = (category or "").lower()

    if any(word in symptoms_lower for word in ("anxiety", "stress", "mental")) or "mental" in category_lower:
        return {"group": "mental_health", "tips": MENTAL_HEALTH_TIPS}
    if any(word in symptoms_lower for word in ("heart", "chest", "pain")):
        return {"group": "heart", "tips": HEART_TIPS}
    if any(word in symptoms_lower for word in ("fever", "cough", "cold")):
        return {"group": "fever", "tips": FEVER_TIPS}
    return {"group": "general", "tips": GENERAL_TIPS}
