import pytest
from pymongo.errors import ServerSelectionTimeoutError

from presx.adapters.audio.push_audio_source import PushAudioSource
from presx.application.intake import IntakeFormController
from presx.application.intake_sessions import IntakeSessionRegistry
from presx.application.ports.services.prediction_service import PredictionServiceError
from presx.application.recording import RecordingCapture
from presx.application.services.backend_errors import UNAVAILABLE
from presx.application.services.prescription_service import PrescriptionService
from presx.domain.entities.intake_form import MedicationEntry
from presx.domain.enums import FormStep
from presx.domain.errors import FormFieldError, FormLockedError, SessionNotFoundError

from conftest import (
    FakePredictionService,
    InMemoryPrescriptionRepository,
    build_use_case,
    make_patient,
)


@pytest.fixture
def controller(submit_use_case, prediction_service):
    return IntakeFormController(
        submit_use_case, prediction_service, recorder=RecordingCapture(tick_seconds=0.01)
    )


def fill_new_patient(controller):
    controller.update_field("patient_type", "new")
    controller.update_group("patient_info", {"name": "Jane Doe", "age": "34", "gender": "female"})
    controller.update_field("symptoms", "fever, cough")


async def test_advance_and_retreat_stay_in_bounds(controller):
    assert controller.retreat() is FormStep.PATIENT_INFO
    for _ in range(10):
        await controller.advance()
    assert controller.step is FormStep.REVIEW
    assert controller.retreat() is FormStep.ADVICE


async def test_leaving_symptoms_requests_prediction(controller, prediction_service):
    controller.update_field("symptoms", " fever, , cough ")
    await controller.advance()
    await controller.advance()
    assert prediction_service.calls == []

    assert await controller.advance() is FormStep.TESTS
    assert prediction_service.calls == ["fever, cough"]
    assert controller.prediction.primary.disease == "Common Cold"


async def test_prediction_failure_still_advances(submit_use_case):
    failing = FakePredictionService(error=PredictionServiceError("service down"))
    controller = IntakeFormController(submit_use_case, failing)
    controller.form.step = FormStep.SYMPTOMS

    assert await controller.advance() is FormStep.TESTS
    assert controller.prediction is None
    assert failing.calls == [""]


def test_medication_rows(controller):
    index = controller.add_medication()
    controller.update_medication(index, "name", "Ibuprofen")
    controller.add_medication(MedicationEntry(name="Paracetamol"))
    assert [m.name for m in controller.form.medications] == ["Ibuprofen", "Paracetamol"]

    controller.remove_medication(0)
    assert [m.name for m in controller.form.medications] == ["Paracetamol"]

    with pytest.raises(FormFieldError):
        controller.update_medication(0, "frequency", "daily")
    with pytest.raises(FormFieldError):
        controller.remove_medication(3)


def test_tests_list_rejects_named_duplicates(controller):
    assert controller.add_test("CBC") is True
    assert controller.add_test(" CBC ") is False
    assert controller.add_test() is True
    assert controller.add_test("") is True
    controller.update_test(1, "Lipid panel")
    assert controller.form.tests == ["CBC", "Lipid panel", ""]
    controller.remove_test(2)
    with pytest.raises(FormFieldError):
        controller.update_test(5, "X")


def test_select_patient_copies_details(controller):
    patient = make_patient(name="John Smith", age=50, gender="male")
    patient.update_medical_info(chronic_conditions=["Diabetes", "Hypertension"])

    controller.select_patient(patient)
    info = controller.form.patient_info
    assert controller.form.patient_type == "existing"
    assert controller.form.selected_patient_id == patient.patient_id.value
    assert (info.name, info.age, info.gender) == ("John Smith", "50", "male")
    assert info.medical_history == "Diabetes, Hypertension"


async def test_successful_submit_locks_form(controller, prescription_repo):
    fill_new_patient(controller)
    outcome = await controller.submit()

    assert outcome.succeeded
    assert outcome.result.prescription_id in prescription_repo.items
    assert controller.locked
    assert controller.is_submitting is False
    with pytest.raises(FormLockedError):
        controller.update_field("advice", "more rest")
    with pytest.raises(FormLockedError):
        await controller.advance()
    with pytest.raises(FormLockedError):
        await controller.submit()


async def test_validation_failure_is_reported(controller, patient_repo):
    controller.update_field("patient_type", "new")
    outcome = await controller.submit()

    assert not outcome.succeeded
    assert outcome.error == "Please fill in all required patient information fields"
    assert controller.submit_error == outcome.error
    assert not controller.locked
    assert controller.is_submitting is False
    assert patient_repo.writes == 0


async def test_backend_failure_message(patient_service, patient_repo, activity_repo, prediction_service):
    class OfflinePrescriptionRepository(InMemoryPrescriptionRepository):
        async def create(self, prescription):
            raise ServerSelectionTimeoutError("no servers")

    prescriptions = PrescriptionService(OfflinePrescriptionRepository(), patient_repo, activity_repo)
    controller = IntakeFormController(
        build_use_case(patient_service, prescriptions), prediction_service
    )
    fill_new_patient(controller)

    outcome = await controller.submit()
    assert outcome.error == UNAVAILABLE
    assert controller.is_submitting is False
    assert not controller.locked


async def test_submit_stops_active_recording(controller):
    fill_new_patient(controller)
    source = PushAudioSource()
    await controller.start_recording(source)
    source.push(b"chunk-1")
    source.push(b"chunk-2")

    outcome = await controller.submit()
    assert outcome.succeeded
    assert not controller.recorder.is_recording
    download = outcome.result.recording_download
    assert download.data == b"chunk-1chunk-2"


async def test_snapshot_shape(controller):
    async with controller:
        await controller.start_recording(PushAudioSource())
        state = controller.snapshot()
        assert state["is_recording"] is True
        assert state["form"]["step_label"] == "Patient Info"
        assert set(state) == {
            "session_id",
            "form",
            "prediction",
            "is_recording",
            "has_recording",
            "recording_duration",
            "is_submitting",
            "submit_error",
            "locked",
        }
    assert not controller.recorder.is_recording


async def test_registry_lifecycle(controller):
    registry = IntakeSessionRegistry(lambda: controller)
    session = await registry.create()
    assert registry.get(session.session_id).controller is controller
    assert registry.session_ids() == [controller.session_id]

    await controller.start_recording(PushAudioSource())
    await registry.close(session.session_id)
    assert not controller.recorder.is_recording
    assert len(registry) == 0
    with pytest.raises(SessionNotFoundError):
        registry.get(session.session_id)
    with pytest.raises(SessionNotFoundError):
        await registry.close(session.session_id)


async def test_registry_close_all(submit_use_case, prediction_service):
    registry = IntakeSessionRegistry(
        lambda: IntakeFormController(submit_use_case, prediction_service)
    )
    sessions = [await registry.create() for _ in range(3)]
    await sessions[0].controller.start_recording(PushAudioSource())
    await registry.close_all()
    assert len(registry) == 0
    assert not sessions[0].controller.recorder.is_recording


async def test_registry_evicts_idle_sessions(submit_use_case, prediction_service):
    now = [1000.0]
    registry = IntakeSessionRegistry(
        lambda: IntakeFormController(
            submit_use_case, prediction_service, recorder=RecordingCapture(tick_seconds=0.01)
        ),
        idle_seconds=60,
        clock=lambda: now[0],
    )
    abandoned = await registry.create()
    active = await registry.create()
    source = PushAudioSource()
    await abandoned.controller.start_recording(source)
    source.push(b"chunk")

    now[0] += 45
    registry.get(active.session_id)
    now[0] += 30
    fresh = await registry.create()

    assert set(registry.session_ids()) == {active.session_id, fresh.session_id}
    assert not abandoned.controller.recorder.is_recording
    assert abandoned.controller.recorder.has_recording
    assert source.stream.released
    with pytest.raises(SessionNotFoundError):
        registry.get(abandoned.session_id)


async def test_registry_without_idle_limit_keeps_sessions(submit_use_case, prediction_service):
    now = [0.0]
    registry = IntakeSessionRegistry(
        lambda: IntakeFormController(submit_use_case, prediction_service),
        idle_seconds=None,
        clock=lambda: now[0],
    )
    await registry.create()
    now[0] += 10 ** 6
    await registry.create()
    assert await registry.evict_idle() == []
    assert len(registry) == 2
