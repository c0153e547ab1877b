"""
MongoDB implementation of PrescriptionRepository.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Set

from presx.application.ports.repositories.prescription_repo import (
    PrescriptionRepository,
)
from presx.domain.entities.prescription import (
    ConsultationInfo,
    ConversationRecording,
    DoctorInfo,
    Medication,
    Prescription,
    PrescriptionDocument,
    TestReport,
)
from presx.domain.enums import ConsultationType, PrescriptionStatus, TestType
from presx.domain.value_objects.prescription_id import PrescriptionId

from ..models.prescription_m import PrescriptionMongo
from .patient_repository import personal_info_to_domain


def _created_range(
    start: Optional[datetime] = None, end: Optional[datetime] = None
) -> Dict[str, Any]:
    bounds: Dict[str, Any] = {}
    if start is not None:
        bounds["$gte"] = start
    if end is not None:
        bounds["$lt"] = end
    return {"created_at": bounds} if bounds else {}


class MongoPrescriptionRepository(PrescriptionRepository):
    """MongoDB implementation of PrescriptionRepository."""

    async def create(self, prescription: Prescription) -> Prescription:
        prescription_mongo = PrescriptionMongo(**prescription.to_record())
        await prescription_mongo.insert()
        return self._mongo_to_domain(prescription_mongo)

    async def update(self, prescription: Prescription) -> Prescription:
        existing = await self._find_document(prescription.prescription_id.value)
        prescription_mongo = PrescriptionMongo(**prescription.to_record())
        if existing is None:
            await prescription_mongo.insert()
        else:
            prescription_mongo.id = existing.id
            await prescription_mongo.replace()
        return self._mongo_to_domain(prescription_mongo)

    async def find_by_id(self, prescription_id: PrescriptionId) -> Optional[Prescription]:
        prescription_mongo = await self._find_document(prescription_id.value)
        if not prescription_mongo:
            return None
        return self._mongo_to_domain(prescription_mongo)

    async def find_by_patient(self, patient_id: str) -> List[Prescription]:
        prescriptions_mongo = (
            await PrescriptionMongo.find(PrescriptionMongo.patient_id == patient_id)
            .sort("-created_at")
            .to_list()
        )
        return [self._mongo_to_domain(p) for p in prescriptions_mongo]

    async def find_recent(self, limit: int = 5) -> List[Prescription]:
        prescriptions_mongo = (
            await PrescriptionMongo.find().sort("-created_at").limit(limit).to_list()
        )
        return [self._mongo_to_domain(p) for p in prescriptions_mongo]

    async def find_created_between(
        self, start: datetime, end: Optional[datetime] = None
    ) -> List[Prescription]:
        prescriptions_mongo = (
            await PrescriptionMongo.find(_created_range(start, end))
            .sort("-created_at")
            .to_list()
        )
        return [self._mongo_to_domain(p) for p in prescriptions_mongo]

    async def count_created_between(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> int:
        return await PrescriptionMongo.find(_created_range(start, end)).count()

    async def distinct_patient_ids_since(self, since: datetime) -> Set[str]:
        patient_ids = await PrescriptionMongo.distinct(
            "patient_id", _created_range(start=since)
        )
        return set(patient_ids)

    async def _find_document(self, prescription_id: str) -> Optional[PrescriptionMongo]:
        return await PrescriptionMongo.find_one(
            PrescriptionMongo.prescription_id == prescription_id
        )

    def _mongo_to_domain(self, prescription_mongo: PrescriptionMongo) -> Prescription:
        consultation = prescription_mongo.consultation_info
        recording = None
        if consultation.conversation_recording:
            stored = consultation.conversation_recording
            recording = ConversationRecording(
                id=stored.id,
                audio_url=stored.audio_url,
                file_name=stored.file_name,
                duration=stored.duration,
                uploaded_at=stored.uploaded_at,
                file_size=stored.file_size,
                transcription=stored.transcription,
            )

        test_reports = None
        if prescription_mongo.test_reports:
            test_reports = [
                TestReport(
                    id=report.id,
                    name=report.name,
                    file_url=report.file_url,
                    file_name=report.file_name,
                    uploaded_at=report.uploaded_at,
                    test_type=TestType(report.test_type),
                    report_date=report.report_date,
                    notes=report.notes,
                )
                for report in prescription_mongo.test_reports
            ]

        doctor = prescription_mongo.doctor_info
        document = prescription_mongo.prescription
        return Prescription(
            prescription_id=PrescriptionId(prescription_mongo.prescription_id),
            patient_id=prescription_mongo.patient_id,
            personal_info=personal_info_to_domain(prescription_mongo.personal_info),
            consultation_info=ConsultationInfo(
                consultation_date=consultation.consultation_date,
                chief_complaint=consultation.chief_complaint,
                diagnosis=consultation.diagnosis,
                consultation_type=ConsultationType(consultation.consultation_type),
                notes=consultation.notes,
                conversation_recording=recording,
            ),
            doctor_info=DoctorInfo(
                doctor_id=doctor.doctor_id,
                doctor_name=doctor.doctor_name,
                specialization=doctor.specialization,
                license_number=doctor.license_number,
            ),
            document=PrescriptionDocument(
                pdf_url=document.pdf_url,
                pdf_file_name=document.pdf_file_name,
                generated_at=document.generated_at,
                expires_at=document.expires_at,
            ),
            medications=[
                Medication(
                    name=med.name,
                    dosage=med.dosage,
                    frequency=med.frequency,
                    duration=med.duration,
                    instructions=med.instructions,
                    quantity=med.quantity,
                    refills=med.refills,
                )
                for med in prescription_mongo.medications
            ],
            test_reports=test_reports,
            status=PrescriptionStatus(prescription_mongo.status),
            created_at=prescription_mongo.created_at,
            updated_at=prescription_mongo.updated_at,
        )
