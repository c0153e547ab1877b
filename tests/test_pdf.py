import re

import pytest

from presx.adapters.pdf.prescription_view import build_prescription_view
from presx.adapters.pdf.renderer import PDFRenderer, RenderedView
from presx.core.config import PDFSettings
from presx.domain.entities.prescription import TestReport
from presx.domain.errors import PDFGenerationError

from conftest import make_patient, make_prescription


def page_count(pdf: bytes) -> int:
    return len(re.findall(rb"/Type\s*/Page(?!s)", pdf))


@pytest.fixture
def renderer():
    return PDFRenderer(PDFSettings(scale=1))


@pytest.fixture
def prescription():
    prescription = make_prescription(make_patient())
    prescription.test_reports = [
        TestReport(
            id="test_0",
            name="Complete Blood Count",
            file_url="",
            file_name="Complete_Blood_Count.pdf",
            uploaded_at=prescription.created_at,
        )
    ]
    return prescription


def test_prescription_view_layout(prescription):
    view = build_prescription_view(prescription)
    texts = [el.text for el in view.elements]
    assert texts[0] == "Prescription"
    assert texts[1].startswith("Generated on: ")
    assert "Dr. John Smith" in texts
    assert "Name: Jane Doe" in texts
    assert "Complete Blood Count" in texts
    button = view.elements[-1]
    assert button.text == "Print Prescription"
    assert button.print_hidden


async def test_generate_single_page_pdf(renderer, prescription):
    pdf = await renderer.generate(build_prescription_view(prescription))
    assert pdf.startswith(b"%PDF")
    assert page_count(pdf) == 1


def test_print_hidden_elements_are_restored(renderer, prescription):
    view = build_prescription_view(prescription)
    image_with_button = renderer.capture(
        RenderedView(elements=[el for el in view.elements if not el.print_hidden])
    )
    image = renderer.capture(view)

    assert all(el.visible for el in view.elements)
    # hidden elements take no space in the capture
    assert image.size == image_with_button.size


def test_capture_is_white_rgb(renderer):
    image = renderer.capture(RenderedView().add("Hello"))
    assert image.mode == "RGB"
    assert image.getpixel((0, 0)) == (255, 255, 255)


def test_long_text_wraps(renderer):
    short = renderer.capture(RenderedView().add("word"))
    long = renderer.capture(RenderedView().add(" ".join(["medication"] * 80)))
    assert long.size[0] == short.size[0]
    assert long.size[1] > short.size[1]


def test_scale_multiplies_width():
    view = RenderedView().add("Hello")
    assert PDFRenderer(PDFSettings(scale=2)).capture(view).size[0] == 2 * view.width


@pytest.mark.parametrize("fmt, orientation", [("letter", "landscape"), ("a4", "portrait")])
def test_page_formats(fmt, orientation):
    renderer = PDFRenderer(PDFSettings(format=fmt, orientation=orientation, scale=1))
    pdf = renderer.render(RenderedView().add("Hello"))
    assert page_count(pdf) == 1


def test_render_failure_is_wrapped(renderer, monkeypatch):
    def broken(image):
        raise OSError("disk full")

    monkeypatch.setattr(renderer, "_to_pdf", broken)
    with pytest.raises(PDFGenerationError) as exc:
        renderer.render(RenderedView().add("Hello"))
    assert exc.value.details == {"reason": "disk full"}
