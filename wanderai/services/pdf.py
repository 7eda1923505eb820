import logging
from typing import Optional

from fpdf import FPDF

from wanderai.services.render import render_itinerary

logger = logging.getLogger("wanderai_server.pdf")

# Core PDF fonts only cover Latin-1
_LATIN1_REPLACEMENTS = {
    "\u2018": "'",
    "\u2019": "'",
    "\u201c": '"',
    "\u201d": '"',
    "\u2013": "-",
    "\u2014": "-",
    "\u2022": "-",
    "\u2026": "...",
}


def to_latin1(text: str) -> str:
    for src, dst in _LATIN1_REPLACEMENTS.items():
        text = text.replace(src, dst)
    return text.encode("latin-1", "ignore").decode("latin-1")


class ItineraryPDF(FPDF):
    def header(self):
        # Header with colored bar
        self.set_fill_color(37, 99, 235)  # Blue-600
        self.rect(0, 0, 210, 20, "F")
        self.set_font("helvetica", "B", 15)
        self.set_text_color(255, 255, 255)
        self.cell(0, 10, "WanderAI", border=0, align="R")
        self.ln(25)

    def footer(self):
        self.set_y(-15)
        self.set_font("helvetica", "I", 8)
        self.set_text_color(128, 128, 128)
        self.cell(0, 10, f"Page {self.page_no()}", align="C")


def build_pdf(content: str, destination: Optional[str] = None) -> bytes:
    """Lays the segmented itinerary out as an A4 document."""
    logger.info(f"Starting PDF generation for {destination or 'itinerary'}")
    sections = render_itinerary(content)

    pdf = ItineraryPDF()
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    # Title
    title = f"Trip to {destination}" if destination else "Your Custom Itinerary"
    pdf.set_font("helvetica", "B", 24)
    pdf.set_text_color(31, 41, 55)  # Gray-800
    pdf.cell(0, 10, to_latin1(title), new_x="LMARGIN", new_y="NEXT", align="C")
    pdf.ln(8)

    for section in sections:
        # Keep a heading together with at least a couple of lines
        if 297 - pdf.get_y() - 15 < 30:
            pdf.add_page()

        pdf.set_fill_color(239, 246, 255)  # Blue-50
        pdf.rect(10, pdf.get_y(), 190, 8, "F")
        pdf.set_font("helvetica", "B", 14)
        pdf.set_text_color(37, 99, 235)
        pdf.cell(0, 8, to_latin1(f" {section.title}"), new_x="LMARGIN", new_y="NEXT")
        pdf.ln(2)

        pdf.set_font("helvetica", "", 10)
        pdf.set_text_color(55, 65, 81)
        for paragraph in section.paragraphs:
            pdf.multi_cell(0, 5, to_latin1(paragraph), new_x="LMARGIN", new_y="NEXT")
            pdf.ln(1)
        for item in section.bullets:
            pdf.set_x(15)
            pdf.multi_cell(0, 5, to_latin1(f"- {item}"), new_x="LMARGIN", new_y="NEXT")
        pdf.ln(4)

    return bytes(pdf.output())
