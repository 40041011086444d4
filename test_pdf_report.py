#!/usr/bin/env python3
"""Test PDF rendering of a cost estimate."""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), 'src'))

from estimator import compute_estimate
from api.pdf_generator import PDFReportGenerator


def test_generate_report_returns_pdf():
    estimate = compute_estimate([
        {"name": "paint", "quantity": 2, "unit": "gallon"},
        {"name": "Modern Armchair", "quantity": 1},
        {"name": "exotic marble & <granite>", "quantity": 3},
    ], "90210")

    buffer = PDFReportGenerator().generate_report(estimate, project_name="Living Room <Refresh>")
    content = buffer.getvalue()

    assert content.startswith(b"%PDF")
    assert content.rstrip().endswith(b"%%EOF")
    assert len(content) > 1000


def test_generator_can_be_reused():
    generator = PDFReportGenerator()
    estimate = compute_estimate([{"name": "paint", "quantity": 1}], "10001")

    first = generator.generate_report(estimate)
    second = generator.generate_report(estimate)

    assert first.getvalue().startswith(b"%PDF")
    assert second.getvalue().startswith(b"%PDF")


if __name__ == "__main__":
    estimate = compute_estimate([{"name": "paint", "quantity": 2}], "90210")
    buffer = PDFReportGenerator().generate_report(estimate, project_name="Sample")
    with open("estimate_sample.pdf", "wb") as f:
        f.write(buffer.getvalue())
    print("Wrote estimate_sample.pdf")
