import pytest

import cura_flows
from medical_data import MEDICAL_SCENARIOS, PATIENTS, render_analysis


pytestmark = pytest.mark.e2e

SCENARIO_CASES = [
    ("routine", "adult", "comprehensive"),
    ("chronic", "geriatric", "chronic"),
    ("emergency", "adult", "emergency"),
    ("preventive", "pediatric", "comprehensive"),
]


def analysis_for(scenario_key: str, template: str, patient) -> str:
    scenario = MEDICAL_SCENARIOS[scenario_key]
    return render_analysis(
        template,
        status=scenario.description,
        risks=", ".join(patient.conditions),
        screenings=", ".join(scenario.tests),
        immediate=scenario.tests[0],
        long_term=scenario.type,
        monitoring=", ".join(scenario.tests),
        concern=scenario.description,
        urgency=scenario.urgency,
        condition=patient.conditions[0],
        meds=", ".join(patient.medications),
        followup=scenario.urgency,
        confidence=92,
    )


@pytest.mark.parametrize("scenario_key,patient_key,template", SCENARIO_CASES)
async def test_ai_analysis_travels_with_booking(page, config, reporter, scenario_key, patient_key, template):
    scenario = MEDICAL_SCENARIOS[scenario_key]
    patient = PATIENTS[patient_key]
    index = list(MEDICAL_SCENARIOS).index(scenario_key)
    facility = config.facilities[index % len(config.facilities)]
    program = config.programs[index % len(config.programs)]
    report = analysis_for(scenario_key, template, patient)
    reporter.log_test_data("Scenario", {
        "type": scenario.type,
        "urgency": scenario.urgency,
        "patient": patient.name,
        "facility": facility,
        "program": program,
        "template": template,
    })

    try:
        await reporter.log_step(page, "AI CASE INTAKE", f"{scenario.type} for {patient.name}")
        await cura_flows.open_home(page, config)
        await cura_flows.open_login(page, config)
        await cura_flows.perform_flexible_login(page, config.credentials["valid"], reporter)
        await cura_flows.fill_appointment_form(
            page, patient, config, reporter,
            facility=facility, program=program, comment=report,
            readmission=scenario.urgency == "Urgent",
        )
        elapsed = await cura_flows.book_appointment(page, config, reporter)
        reporter.log_performance("AI Case Submission Time", elapsed)

        outcome = await cura_flows.validate_booking_outcome(page, config, reporter)
        confirmation = await cura_flows.read_confirmation(page)
        reporter.log_test_data("Appointment Confirmation", confirmation)
        heading = report.splitlines()[0]
        echoed = heading in (confirmation.get("comment") or "")
        await reporter.log_verification(page, "AI Report Echoed", echoed, f"Expected heading: {heading}")
        facility_matches = confirmation.get("facility") == facility
        await reporter.log_verification(page, "Facility Confirmed", facility_matches, f"{confirmation.get('facility')} vs {facility}")
    except Exception as e:
        await reporter.log_error(page, f"{scenario.type} Workflow Failed", e)
        raise

    reporter.log_test_completion(f"AI Workflow - {scenario.type}", outcome.passed and echoed)
    assert outcome.passed, outcome.details
    assert echoed
