"""
Card Library - Authored cards for the clinician and patient decks.

Cards are written as plain dicts and loaded through
CardDefinition.from_dict, the same path used for externally supplied
content.
"""

from __future__ import annotations

from ..content import CardCatalog, CardDefinition


CLINICIAN_CARDS = [
    {
        "id": "pt_rom_assessment",
        "name": "Range of Motion Test",
        "type": "assessment",
        "energy_cost": 2,
        "rarity": "common",
        "card_text": "Reveal 1 physical finding. The patient may answer with a deflection.",
        "flavor_text": "Asking 'can you move it?' with a goniometer in hand.",
        "clues_revealed": 1,
        "assessment_category": "physical_exam",
    },
    {
        "id": "pt_active_listening",
        "name": "Actually Listen",
        "type": "communication",
        "energy_cost": 0,
        "rarity": "common",
        "card_text": "Counter a patient emotional card. Gain +1 rapport.",
        "flavor_text": "Paying attention turns out to be therapeutic.",
        "rapport_change": 1,
        "counters_emotional": True,
        "target_kind": "active_effect",
    },
    {
        "id": "pt_pain_scale_reality",
        "name": "Pain Scale Reality Check",
        "type": "history_taking",
        "energy_cost": 1,
        "rarity": "uncommon",
        "card_text": "Reveal the pain history. +10 diagnostic confidence.",
        "flavor_text": "A pain scale that means more than 'it hurts'.",
        "clues_revealed": 1,
        "confidence_boost": 10,
    },
    {
        "id": "pt_differential_diagnosis",
        "name": "Differential Diagnosis",
        "type": "clinical_reasoning",
        "energy_cost": 3,
        "rarity": "rare",
        "card_text": "Narrow the differential. +15 diagnostic confidence. Requires 4 clues.",
        "flavor_text": "Ruling things out matters as much as ruling them in.",
        "requires_clues": 4,
        "confidence_boost": 15,
    },
    {
        "id": "pt_therapeutic_exercise",
        "name": "Evidence-Based Exercise",
        "type": "treatment",
        "energy_cost": 2,
        "rarity": "uncommon",
        "card_text": "Address a functional limitation. Requires an assessment first.",
        "flavor_text": "Base treatment on actual findings.",
        "requires_assessment": True,
    },
]

PATIENT_CARDS = [
    {
        "id": "patient_dr_google",
        "name": "WebMD Consultation",
        "type": "deflection",
        "deflection_cost": 2,
        "rarity": "common",
        "card_text": "Counter an assessment. \"I already know what this is from the internet.\"",
        "flavor_text": "Ten minutes online against years of training.",
        "counters": ["assessment"],
    },
    {
        "id": "patient_previous_provider",
        "name": "My Last Therapist Said...",
        "type": "deflection",
        "deflection_cost": 1,
        "rarity": "common",
        "card_text": "Redirect to previous treatment. The next finding is less reliable.",
        "flavor_text": "Every previous provider was either amazing or terrible.",
        "information_reduction": 0.4,
    },
    {
        "id": "patient_time_constraint",
        "name": "Running Late Drama",
        "type": "complexity",
        "emotional_cost": 1,
        "rarity": "common",
        "card_text": "Add time pressure. The clinician must prioritize.",
        "flavor_text": "Proper evaluation, now under pressure.",
        "adds_complexity": True,
        "complexity_type": "time_pressure",
    },
    {
        "id": "patient_insurance_anxiety",
        "name": "Coverage Concerns",
        "type": "emotional_state",
        "emotional_cost": 2,
        "rarity": "uncommon",
        "card_text": "Address financial concerns or lose rapport on every new finding.",
        "flavor_text": "Healthcare anxiety with extra paperwork.",
        "emotion_type": "anxiety",
        "requires_response": "communication",
        "triggers": ["reveal_clues"],
        "triggered_change": {"role": "clinician", "resource": "rapport", "delta": -1},
    },
    {
        "id": "patient_miracle_cure",
        "name": "Quick Fix Expectation",
        "type": "deflection",
        "deflection_cost": 2,
        "rarity": "uncommon",
        "card_text": "Demand an immediate solution. Counters treatment.",
        "flavor_text": "Healing should work like a software update.",
        "counters": ["treatment"],
        "requires_education": True,
    },
]

CASE_CARDS = {
    "ankle_sprain": {
        "clinician": [
            {
                "id": "pt_ottawa_ankle_rules",
                "name": "Ottawa Ankle Rules",
                "type": "assessment",
                "energy_cost": 2,
                "rarity": "rare",
                "card_text": "Evidence-based fracture screen. High-confidence finding.",
                "flavor_text": "Evidence-based decision making.",
                "clues_revealed": 1,
                "confidence_boost": 25,
                "assessment_category": "special_test",
            },
            {
                "id": "pt_weight_bearing_test",
                "name": "Weight Bearing Assessment",
                "type": "assessment",
                "energy_cost": 1,
                "rarity": "common",
                "card_text": "Observe functional weight bearing.",
                "flavor_text": "The most basic tests can tell you everything.",
                "clues_revealed": 1,
                "assessment_category": "functional",
            },
        ],
        "patient": [
            {
                "id": "patient_athlete_invincibility",
                "name": "Athletic Invincibility Complex",
                "type": "deflection",
                "deflection_cost": 2,
                "rarity": "uncommon",
                "card_text": "Minimize the injury. \"I can play through anything.\"",
                "flavor_text": "Pain is just weakness leaving the body.",
                "information_reduction": 0.6,
            },
            {
                "id": "patient_ankle_sprain_expert",
                "name": "Ankle Sprain Expert",
                "type": "deflection",
                "deflection_cost": 1,
                "rarity": "common",
                "card_text": "Dismiss the assessment. \"It's just a sprain.\"",
                "flavor_text": "Self-diagnosis, no training required.",
                "information_reduction": 0.3,
            },
        ],
    },
    "lower_back_pain": {
        "clinician": [
            {
                "id": "pt_red_flag_screening",
                "name": "Red Flag Screening",
                "type": "assessment",
                "energy_cost": 2,
                "rarity": "rare",
                "card_text": "Screen for serious pathology.",
                "flavor_text": "Some things actually are serious.",
                "clues_revealed": 1,
                "confidence_boost": 30,
                "assessment_category": "screening",
            },
            {
                "id": "pt_movement_screen",
                "name": "Movement Analysis",
                "type": "assessment",
                "energy_cost": 2,
                "rarity": "uncommon",
                "card_text": "Assess movement patterns and functional limitations.",
                "flavor_text": "Movement tells a story if you watch.",
                "clues_revealed": 1,
                "assessment_category": "movement",
            },
        ],
        "patient": [
            {
                "id": "patient_back_pain_veteran",
                "name": "Chronic Pain Veteran",
                "type": "complexity",
                "emotional_cost": 2,
                "rarity": "uncommon",
                "card_text": "Add complexity from previous treatments. \"I've tried everything.\"",
                "flavor_text": "An unwilling tour guide of the healthcare system.",
                "adds_complexity": True,
                "complexity_type": "medical_history",
            },
        ],
    },
}

ADVANCED_CLINICIAN_CARDS = [
    {
        "id": "pt_motivational_interviewing",
        "name": "Motivational Interviewing",
        "type": "communication",
        "energy_cost": 3,
        "rarity": "rare",
        "card_text": "Counter patient resistance. +2 rapport.",
        "flavor_text": "Psychology meets physiotherapy.",
        "rapport_change": 2,
        "counters_resistance": True,
    },
    {
        "id": "pt_clinical_prediction_rules",
        "name": "Clinical Prediction Rules",
        "type": "clinical_reasoning",
        "energy_cost": 3,
        "rarity": "rare",
        "card_text": "Apply validated screening tools. +20 diagnostic confidence. Requires 3 clues.",
        "flavor_text": "Evidence-based practice in action.",
        "confidence_boost": 20,
        "requires_clues": 3,
    },
    {
        "id": "pt_patient_education",
        "name": "Proper Patient Education",
        "type": "communication",
        "energy_cost": 2,
        "rarity": "uncommon",
        "card_text": "Educate about the condition. Counters misinformation. +1 rapport.",
        "flavor_text": "One patient at a time against Dr. Google.",
        "counters_misinformation": True,
        "rapport_change": 1,
    },
    {
        "id": "pt_clinical_instructor",
        "name": "Ask Your Clinical Instructor",
        "type": "clinical_reasoning",
        "energy_cost": 2,
        "rarity": "uncommon",
        "card_text": "Bring in a mentor. Assessments reveal an extra clue for 2 turns.",
        "flavor_text": "Someone who has seen this before.",
        "confidence_boost": 5,
        "grants_modifier": "mentor_visit",
    },
]

ADVANCED_PATIENT_CARDS = [
    {
        "id": "patient_litigation_concern",
        "name": "Legal Anxiety",
        "type": "emotional_state",
        "emotional_cost": 3,
        "rarity": "rare",
        "card_text": "Worry about legal implications. Communication becomes critical.",
        "flavor_text": "Healthcare meets the legal system.",
        "emotion_type": "anxiety",
        "intensity": "high",
        "requires_response": "communication",
    },
    {
        "id": "patient_secondary_gain",
        "name": "Secondary Gain Complexity",
        "type": "complexity",
        "emotional_cost": 2,
        "rarity": "rare",
        "card_text": "Multiple motivations affect the presentation.",
        "flavor_text": "More complicated than the anatomy charts.",
        "adds_complexity": True,
        "complexity_type": "psychosocial",
    },
    {
        "id": "patient_cultural_considerations",
        "name": "Cultural Health Beliefs",
        "type": "complexity",
        "emotional_cost": 1,
        "rarity": "uncommon",
        "card_text": "A different perspective on pain and healing.",
        "flavor_text": "One size does not fit all.",
        "adds_complexity": True,
        "complexity_type": "cultural",
    },
]


def build_catalog() -> CardCatalog:
    """Load every authored card into a fresh catalog."""
    catalog = CardCatalog()
    for data in CLINICIAN_CARDS:
        catalog.add(CardDefinition.from_dict(data), "clinician")
    for data in PATIENT_CARDS:
        catalog.add(CardDefinition.from_dict(data), "patient")
    for case_id, pools in CASE_CARDS.items():
        for role, cards in pools.items():
            for data in cards:
                catalog.add(CardDefinition.from_dict(data), role, case_id=case_id)
    for data in ADVANCED_CLINICIAN_CARDS:
        catalog.add(CardDefinition.from_dict(data), "clinician", advanced=True)
    for data in ADVANCED_PATIENT_CARDS:
        catalog.add(CardDefinition.from_dict(data), "patient", advanced=True)
    return catalog
