"""Printable layout of a prescription."""

from datetime import datetime

from ...domain.entities.prescription import Prescription
from .renderer import RenderedView


def _format_date(value: datetime) -> str:
    return f"{value.month}/{value.day}/{value.year}"


def build_prescription_view(prescription: Prescription) -> RenderedView:
    info = prescription.personal_info
    doctor = prescription.doctor_info
    consultation = prescription.consultation_info

    view = RenderedView()
    view.add("Prescription", "title")
    view.add(f"Generated on: {_format_date(prescription.document.generated_at)}", "muted")
    view.add(doctor.doctor_name, "right")
    view.add(doctor.specialization, "right")
    view.add(f"License: {doctor.license_number}", "right")
    view.add(style="rule")

    view.add("Patient Details", "heading")
    view.add(f"Name: {info.name}")
    view.add(f"Age/Gender: {info.age} / {info.gender.value}")
    if info.phone:
        view.add(f"Phone: {info.phone}")
    view.add(style="spacer")

    view.add("Consultation", "heading")
    view.add(f"Date: {_format_date(consultation.consultation_date)}")
    view.add(f"Type: {consultation.consultation_type.value}")
    view.add(f"Chief Complaint: {consultation.chief_complaint}")
    view.add(f"Diagnosis: {consultation.diagnosis}")
    view.add(f"Notes: {consultation.notes or ''}")
    view.add(style="spacer")

    view.add("Medications", "heading")
    for med in prescription.medications:
        view.add(f"Name: {med.name}")
        view.add(f"Dosage: {med.dosage}")
        view.add(f"Frequency: {med.frequency}")
        view.add(f"Duration: {med.duration}")
        view.add(f"Instructions: {med.instructions or ''}")
        view.add(style="rule")

    if prescription.test_reports:
        view.add("Tests", "heading")
        for report in prescription.test_reports:
            view.add(report.name)
        view.add(style="spacer")

    view.add("Print Prescription", "button", print_hidden=True)
    return view
