from dataclasses import dataclass
from types import MappingProxyType


@dataclass(frozen=True)
class Patient:
    name: str
    age: int
    conditions: tuple
    medications: tuple

    def comment(self) -> str:
        return f"Patient: {self.name}\nAge: {self.age}\nConditions: {', '.join(self.conditions)}"


@dataclass(frozen=True)
class ScenarioTemplate:
    type: str
    urgency: str
    description: str
    tests: tuple


@dataclass(frozen=True)
class TermSet:
    common: tuple
    forms: tuple
    clinical: tuple

    def as_dict(self) -> dict:
        return {"common": list(self.common), "forms": list(self.forms), "clinical": list(self.clinical)}


PATIENTS = MappingProxyType({
    "adult": Patient(
        name="John Smith",
        age=45,
        conditions=("Hypertension", "Diabetes Type 2"),
        medications=("Lisinopril 10mg", "Metformin 500mg"),
    ),
    "pediatric": Patient(
        name="Emma Johnson",
        age=8,
        conditions=("Asthma", "Allergies"),
        medications=("Albuterol Inhaler",),
    ),
    "geriatric": Patient(
        name="Robert Brown",
        age=72,
        conditions=("Arthritis", "Hypertension", "High Cholesterol"),
        medications=("Atorvastatin 20mg", "Lisinopril 10mg"),
    ),
})

MEDICAL_SCENARIOS = MappingProxyType({
    "routine": ScenarioTemplate(
        type="Routine Checkup",
        urgency="Scheduled",
        description="Annual physical examination and health assessment",
        tests=("Blood Pressure", "Blood Tests", "Physical Exam"),
    ),
    "chronic": ScenarioTemplate(
        type="Chronic Condition Management",
        urgency="Follow-up",
        description="Management of ongoing chronic health conditions",
        tests=("Blood Work", "Medication Review", "Symptom Assessment"),
    ),
    "emergency": ScenarioTemplate(
        type="Emergency Care",
        urgency="Urgent",
        description="Immediate medical attention required",
        tests=("Vital Signs", "ECG", "Emergency Blood Work"),
    ),
    "preventive": ScenarioTemplate(
        type="Preventive Care",
        urgency="Routine",
        description="Preventive screenings and health maintenance",
        tests=("Cancer Screening", "Vaccinations", "Health Counseling"),
    ),
})

AI_ANALYSIS_TEMPLATES = MappingProxyType({
    "comprehensive": """AI MEDICAL ANALYSIS REPORT
===========================
PATIENT ASSESSMENT:
- Overall Health Status: {status}
- Risk Factors Identified: {risks}
- Recommended Screenings: {screenings}

TREATMENT RECOMMENDATIONS:
- Immediate Actions: {immediate}
- Long-term Management: {long_term}
- Specialist Referrals: {referrals}

FOLLOW-UP PLAN:
- Next Appointment: {next_appointment}
- Monitoring Requirements: {monitoring}
- Patient Education: {education}

AI CONFIDENCE SCORE: {confidence}%""",
    "emergency": """EMERGENCY AI ASSESSMENT
=======================
CRITICAL FINDINGS:
- Primary Concern: {concern}
- Vital Signs: {vitals}
- Risk Level: {risk_level}

IMMEDIATE ACTIONS REQUIRED:
- {action1}
- {action2}
- {action3}

URGENCY: {urgency}
CONFIDENCE: {confidence}%""",
    "chronic": """CHRONIC CONDITION AI MANAGEMENT
===============================
CONDITION OVERVIEW:
- Primary Condition: {condition}
- Severity: {severity}
- Stability: {stability}

MANAGEMENT RECOMMENDATIONS:
- Medication Adjustments: {meds}
- Lifestyle Modifications: {lifestyle}
- Monitoring Parameters: {monitoring}

FOLLOW-UP: {followup}
CONFIDENCE: {confidence}%""",
})

MULTILINGUAL_TERMS = MappingProxyType({
    "english": TermSet(
        common=("Appointment", "Medical", "Health", "Care", "Patient", "Doctor", "Hospital"),
        forms=("Login", "Username", "Password", "Submit", "Book", "Date"),
        clinical=("Treatment", "Diagnosis", "Prescription", "Symptoms", "Examination"),
    ),
    "spanish": TermSet(
        common=("Cita", "Médico", "Salud", "Cuidado", "Paciente", "Doctor", "Hospital"),
        forms=("Iniciar Sesión", "Usuario", "Contraseña", "Enviar", "Reservar", "Fecha"),
        clinical=("Tratamiento", "Diagnóstico", "Receta", "Síntomas", "Examen"),
    ),
    "french": TermSet(
        common=("Rendez-vous", "Médical", "Santé", "Soins", "Patient", "Docteur", "Hôpital"),
        forms=("Connexion", "Nom d'utilisateur", "Mot de passe", "Soumettre", "Réserver", "Date"),
        clinical=("Traitement", "Diagnostic", "Ordonnance", "Symptômes", "Examen"),
    ),
})

SECURITY_PAYLOADS = MappingProxyType({
    "sql_injection": (
        "' OR '1'='1",
        "'; DROP TABLE users; --",
        "' UNION SELECT * FROM passwords --",
    ),
    "xss_attempts": (
        "<script>alert('xss')</script>",
        "<img src=x onerror=alert('xss')>",
        "javascript:alert('xss')",
    ),
    "path_traversal": (
        "../../../etc/passwd",
        "..\\..\\..\\windows\\system32\\drivers\\etc\\hosts",
    ),
})

ERROR_SCENARIOS = MappingProxyType({
    "invalid_dates": (
        "2020-01-01",  # past date
        "invalid-date",
        "2025-02-30",  # no such day
        "13/13/2023",  # bad month
    ),
    "long_inputs": (
        "A" * 1000,
        "Test with special chars!@#$%^&*()",
        "Multi\nline\ninput\nwith\nmany\nlines",
        "   Leading and trailing spaces   ",
    ),
    "boundary_values": (
        "",
        " ",
        "a",
        "VeryLongNameThatExceedsTypicalFieldLimitsByHavingLotsOfCharactersInIt",
    ),
})


class _MissingAsNA(dict):
    def __missing__(self, key):
        return "N/A"


def terms_for(language: str) -> TermSet:
    return MULTILINGUAL_TERMS.get(language, MULTILINGUAL_TERMS["english"])


def render_analysis(template: str, **fields) -> str:
    """Fill an AI analysis template; placeholders without a value render as N/A."""
    return AI_ANALYSIS_TEMPLATES[template].format_map(_MissingAsNA(fields))


def all_security_payloads() -> list[tuple[str, str]]:
    return [(kind, payload) for kind, payloads in SECURITY_PAYLOADS.items() for payload in payloads]
