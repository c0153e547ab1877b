"""
MongoDB implementation of PatientRepository.
"""

from typing import List, Optional, Tuple

from presx.application.ports.repositories.patient_repo import PatientRepository
from presx.domain.entities.patient import (
    EmergencyContact,
    MedicalInfo,
    Patient,
    PersonalInfo,
)
from presx.domain.value_objects.patient_id import PatientId

from ..models.patient_m import PatientMongo, PersonalInfoMongo

ACTIVE = {"is_active": True}


def personal_info_to_domain(info: PersonalInfoMongo) -> PersonalInfo:
    """Shared with the prescription repository, which embeds the same shape."""
    contact = None
    if info.emergency_contact:
        contact = EmergencyContact(
            name=info.emergency_contact.name,
            phone=info.emergency_contact.phone,
            relationship=info.emergency_contact.relationship,
        )
    return PersonalInfo(
        name=info.name,
        age=info.age,
        gender=info.gender,
        phone=info.phone or "",
        email=info.email,
        address=info.address,
        emergency_contact=contact,
    )


class MongoPatientRepository(PatientRepository):
    """MongoDB implementation of PatientRepository."""

    async def create(self, patient: Patient) -> Patient:
        patient_mongo = PatientMongo(**patient.to_record())
        await patient_mongo.insert()
        return self._mongo_to_domain(patient_mongo)

    async def update(self, patient: Patient) -> Patient:
        existing = await self._find_document(patient.patient_id.value)
        patient_mongo = PatientMongo(**patient.to_record())
        if existing is None:
            await patient_mongo.insert()
        else:
            # full replace so cleared optional fields disappear from the document
            patient_mongo.id = existing.id
            await patient_mongo.replace()
        return self._mongo_to_domain(patient_mongo)

    async def find_by_id(self, patient_id: PatientId) -> Optional[Patient]:
        patient_mongo = await self._find_document(patient_id.value)
        if not patient_mongo:
            return None
        return self._mongo_to_domain(patient_mongo)

    async def list_active(
        self, after: Optional[PatientId] = None, limit: int = 20
    ) -> Tuple[List[Patient], bool]:
        query = dict(ACTIVE)
        if after is not None:
            cursor = await self._find_document(after.value)
            if cursor is not None:
                # keyset pagination over (updated_at desc, patient_id desc)
                query["$or"] = [
                    {"updated_at": {"$lt": cursor.updated_at}},
                    {
                        "updated_at": cursor.updated_at,
                        "patient_id": {"$lt": cursor.patient_id},
                    },
                ]

        # one extra row tells whether another page exists
        patients_mongo = (
            await PatientMongo.find(query)
            .sort("-updated_at", "-patient_id")
            .limit(limit + 1)
            .to_list()
        )
        has_more = len(patients_mongo) > limit
        return [self._mongo_to_domain(p) for p in patients_mongo[:limit]], has_more

    async def list_active_by_name(self) -> List[Patient]:
        patients_mongo = (
            await PatientMongo.find(ACTIVE).sort("+personal_info.name").to_list()
        )
        return [self._mongo_to_domain(p) for p in patients_mongo]

    async def count_active(self) -> int:
        return await PatientMongo.find(ACTIVE).count()

    async def _find_document(self, patient_id: str) -> Optional[PatientMongo]:
        return await PatientMongo.find_one(PatientMongo.patient_id == patient_id)

    def _mongo_to_domain(self, patient_mongo: PatientMongo) -> Patient:
        medical_info = None
        if patient_mongo.medical_info:
            medical_info = MedicalInfo(
                blood_group=patient_mongo.medical_info.blood_group,
                allergies=list(patient_mongo.medical_info.allergies or []),
                chronic_conditions=list(patient_mongo.medical_info.chronic_conditions or []),
                current_medications=list(patient_mongo.medical_info.current_medications or []),
            )

        return Patient(
            patient_id=PatientId(patient_mongo.patient_id),
            personal_info=personal_info_to_domain(patient_mongo.personal_info),
            medical_info=medical_info,
            is_active=patient_mongo.is_active,
            created_at=patient_mongo.created_at,
            updated_at=patient_mongo.updated_at,
        )
