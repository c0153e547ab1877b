from datetime import datetime, timedelta, timezone

import pytest

from presx.application.dto.patient_dto import PatientUpdate
from presx.application.dto.prescription_dto import PrescriptionUpdate
from presx.application.ports.repositories.patient_repo import PatientRepository
from presx.application.services.search_service import SearchService
from presx.domain.entities.patient import MedicalInfo, PersonalInfo
from presx.domain.enums import ActivityType, PrescriptionStatus
from presx.domain.errors import PatientNotFoundError, PrescriptionNotFoundError
from presx.domain.value_objects.patient_id import PatientId

from conftest import make_patient, make_prescription


# Patients


def test_patient_repository_operations():
    assert PatientRepository.__abstractmethods__ == {
        "create",
        "update",
        "find_by_id",
        "list_active",
        "list_active_by_name",
        "count_active",
    }


async def test_create_patient_stamps_times_and_logs_activity(patient_service, activity_repo):
    patient = await patient_service.create_patient(
        PersonalInfo(name="Jane Doe", age=34, gender="female"),
        medical_info=MedicalInfo(),
    )
    assert patient.created_at == patient.updated_at
    assert patient.medical_info is None
    assert len(activity_repo.items) == 1
    activity = activity_repo.items[0]
    assert activity.type is ActivityType.PATIENT_ADDED
    assert activity.patient_name == "Jane Doe"
    assert activity.description == "New patient Jane Doe added"


async def test_update_patient_keeps_created_at(patient_service, patient_repo):
    patient = make_patient(updated_at=datetime(2024, 1, 1))
    await patient_repo.create(patient)

    updated = await patient_service.update_patient(
        patient.patient_id.value, PatientUpdate(phone="555-0199", allergies=["Penicillin"])
    )
    assert updated.created_at == datetime(2024, 1, 1)
    assert updated.updated_at > updated.created_at
    assert updated.personal_info.phone == "555-0199"
    assert updated.personal_info.name == "Jane Doe"
    assert updated.medical_info.allergies == ["Penicillin"]


async def test_update_unknown_patient_raises(patient_service):
    with pytest.raises(PatientNotFoundError):
        await patient_service.update_patient(PatientId.generate().value, PatientUpdate(age=40))


async def test_deactivate_patient_is_soft_delete(patient_service, patient_repo):
    patient = make_patient()
    await patient_repo.create(patient)

    await patient_service.deactivate_patient(patient.patient_id.value)
    assert patient_repo.items[patient.patient_id.value].is_active is False
    assert await patient_repo.count_active() == 0


async def test_get_all_patients_paginates(patient_service, patient_repo):
    base = datetime(2024, 1, 1)
    for i in range(5):
        await patient_repo.create(make_patient(name=f"P{i}", updated_at=base + timedelta(hours=i)))

    first = await patient_service.get_all_patients(page_size=2)
    assert [p.name for p in first.patients] == ["P4", "P3"]
    assert first.has_more is True

    second = await patient_service.get_all_patients(after=first.last_patient_id, page_size=2)
    assert [p.name for p in second.patients] == ["P2", "P1"]

    last = await patient_service.get_all_patients(after=second.last_patient_id, page_size=2)
    assert [p.name for p in last.patients] == ["P0"]
    assert last.has_more is False


async def test_get_patient_by_id_missing_returns_none(patient_service):
    assert await patient_service.get_patient_by_id(PatientId.generate().value) is None


# Prescriptions


async def test_create_prescription_requires_patient(prescription_service, prescription_repo):
    orphan = make_prescription(make_patient())
    with pytest.raises(PatientNotFoundError):
        await prescription_service.create_prescription(orphan)
    assert prescription_repo.writes == 0


async def test_create_prescription_appends_activity_after_write(
    prescription_service, patient_repo, activity_repo
):
    patient = make_patient()
    await patient_repo.create(patient)

    saved = await prescription_service.create_prescription(make_prescription(patient))
    activity = activity_repo.items[-1]
    assert activity.type is ActivityType.PRESCRIPTION_CREATED
    assert activity.prescription_id == saved.prescription_id.value
    assert activity.description == "Prescription created for Jane Doe"
    assert saved.created_at == saved.updated_at == activity.timestamp


async def test_update_prescription(prescription_service, prescription_repo, patient_repo):
    patient = make_patient()
    prescription = make_prescription(patient, created_at=datetime(2024, 2, 1))
    await prescription_repo.create(prescription)

    updated = await prescription_service.update_prescription(
        prescription.prescription_id.value,
        PrescriptionUpdate(status=PrescriptionStatus.FULFILLED, pdf_url="https://x/p.pdf"),
    )
    assert updated.status is PrescriptionStatus.FULFILLED
    assert updated.document.pdf_url == "https://x/p.pdf"
    assert updated.created_at == datetime(2024, 2, 1)
    assert updated.updated_at > updated.created_at


async def test_require_unknown_prescription(prescription_service):
    with pytest.raises(PrescriptionNotFoundError):
        await prescription_service.require_prescription(PatientId.generate().value)


async def test_date_range_is_inclusive(prescription_service, prescription_repo):
    patient = make_patient()
    start = datetime(2024, 3, 1)
    end = datetime(2024, 3, 31)
    inside = make_prescription(patient, created_at=end)
    outside = make_prescription(patient, created_at=end + timedelta(seconds=1))
    await prescription_repo.create(inside)
    await prescription_repo.create(outside)

    found = await prescription_service.get_prescriptions_by_date_range(start, end)
    assert [p.prescription_id for p in found] == [inside.prescription_id]

    with pytest.raises(ValueError):
        await prescription_service.get_prescriptions_by_date_range(end, start)


async def test_prescriptions_by_patient_newest_first(prescription_service, prescription_repo):
    patient = make_patient()
    older = make_prescription(patient, created_at=datetime(2024, 1, 1))
    newer = make_prescription(patient, created_at=datetime(2024, 1, 2))
    await prescription_repo.create(older)
    await prescription_repo.create(newer)
    await prescription_repo.create(make_prescription(make_patient(name="Other")))

    found = await prescription_service.get_prescriptions_by_patient(patient.patient_id.value)
    assert [p.prescription_id for p in found] == [newer.prescription_id, older.prescription_id]


# Dashboard

NOW = datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)  # a Wednesday


async def _seed(patient_repo, prescription_repo):
    jane = make_patient(name="Jane")
    john = make_patient(name="John")
    await patient_repo.create(jane)
    await patient_repo.create(john)
    await patient_repo.create(make_patient(name="Gone", is_active=False))
    stamps = [
        (jane, datetime(2024, 5, 15, 9, 0)),  # today
        (jane, datetime(2024, 5, 13, 9, 0)),  # this week, recent
        (john, datetime(2024, 5, 2, 9, 0)),  # this month, not recent
        (john, datetime(2024, 3, 1, 9, 0)),  # older than 30 days
    ]
    for patient, stamp in stamps:
        await prescription_repo.create(make_prescription(patient, created_at=stamp))
    return jane, john


async def test_dashboard_stats(dashboard_service, patient_repo, prescription_repo):
    await _seed(patient_repo, prescription_repo)
    stats = await dashboard_service.get_stats(now=NOW)
    assert stats.total_patients == 2
    assert stats.recent_prescriptions == 2
    assert stats.todays_prescriptions == 1
    assert stats.active_patients == 2


async def test_dashboard_stats_use_local_calendar_day(dashboard_service, patient_repo, prescription_repo):
    patient = make_patient()
    await patient_repo.create(patient)
    # 23:30 UTC on the 14th is already the 15th at UTC+2
    await prescription_repo.create(make_prescription(patient, created_at=datetime(2024, 5, 14, 23, 30)))

    local_now = datetime(2024, 5, 15, 10, 0, tzinfo=timezone(timedelta(hours=2)))
    stats = await dashboard_service.get_stats(now=local_now)
    assert stats.todays_prescriptions == 1

    stats_utc = await dashboard_service.get_stats(now=NOW)
    assert stats_utc.todays_prescriptions == 0


async def test_recent_patients_skip_missing(dashboard_service, patient_repo, prescription_repo):
    jane, _ = await _seed(patient_repo, prescription_repo)
    await prescription_repo.create(
        make_prescription(make_patient(name="Ghost"), created_at=datetime(2024, 5, 16))
    )
    recent = await dashboard_service.get_recent_patients_with_prescriptions(limit=2)
    assert len(recent) == 1
    assert recent[0].patient.patient_id == jane.patient_id
    assert recent[0].latest_prescription.status is PrescriptionStatus.ACTIVE


async def test_dashboard_data_is_idempotent(dashboard_service, patient_repo, prescription_repo):
    await _seed(patient_repo, prescription_repo)
    first = await dashboard_service.get_dashboard_data(now=NOW)
    second = await dashboard_service.get_dashboard_data(now=NOW)
    assert first.stats == second.stats
    assert len(first.recent_patients) <= 5


async def test_update_dashboard_stats_snapshot(
    dashboard_service, patient_repo, prescription_repo, stats_repo
):
    await _seed(patient_repo, prescription_repo)
    snapshot = await dashboard_service.update_dashboard_stats(now=NOW)
    assert snapshot.stats_id == "stats_2024_05_15"
    assert snapshot.total_prescriptions == 4
    assert snapshot.prescriptions_today == 1
    # week starts Sunday the 12th
    assert snapshot.prescriptions_this_week == 2
    assert snapshot.prescriptions_this_month == 3
    assert snapshot.active_patients == 2
    assert await stats_repo.find_by_id("stats_2024_05_15") == snapshot

    await dashboard_service.update_dashboard_stats(now=NOW)
    assert len(stats_repo.items) == 1


async def test_recent_activities_newest_first(dashboard_service, activity_repo, patient_service):
    await patient_service.create_patient(PersonalInfo(name="A", age=1, gender="male"))
    await patient_service.create_patient(PersonalInfo(name="B", age=2, gender="male"))
    activities = await dashboard_service.get_recent_activities(10)
    assert {a.patient_name for a in activities} == {"A", "B"}
    assert all(a.type is ActivityType.PATIENT_ADDED for a in activities)


# Search


async def test_search_is_case_insensitive_substring(patient_repo):
    for name in ("Jane Doe", "John Smith", "Janet Roe"):
        await patient_repo.create(make_patient(name=name))
    await patient_repo.create(make_patient(name="Jane Inactive", is_active=False))
    search = SearchService(patient_repo)

    assert [p.name for p in await search.search_patients_by_name("  JAN ")] == [
        "Jane Doe",
        "Janet Roe",
    ]
    assert await search.search_patients_by_name("   ") == []
    assert await search.search_patients_by_name("zed") == []
