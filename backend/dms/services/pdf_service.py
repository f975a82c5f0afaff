from fpdf import FPDF


def _latin1(text: str) -> str:
    """fpdf built-in fonts only cover latin-1."""
    return text.encode("latin-1", errors="replace").decode("latin-1")


def generate_routing_slip(document: dict, route: list[str], trails: list[dict]) -> bytes:
    """Render a routing slip: header fields, the department route and the trail table."""
    pdf = FPDF()
    pdf.set_margins(15, 15, 15)
    pdf.add_page()

    pdf.set_font("Helvetica", "B", 16)
    pdf.cell(0, 10, "ROUTING SLIP", align="C", ln=True)
    pdf.ln(2)

    pdf.set_font("Helvetica", "", 10)
    for label, key in (
        ("Document Code", "document_code"),
        ("Title", "title"),
        ("Type", "document_type"),
        ("Classification", "classification"),
        ("Origin", "origin"),
        ("Status", "status"),
        ("Created", "created_at"),
    ):
        value = document.get(key) or "-"
        pdf.set_font("Helvetica", "B", 10)
        pdf.cell(40, 7, _latin1(f"{label}:"))
        pdf.set_font("Helvetica", "", 10)
        pdf.multi_cell(0, 7, _latin1(str(value)))

    pdf.ln(3)
    pdf.set_draw_color(200, 200, 200)
    pdf.line(15, pdf.get_y(), 195, pdf.get_y())
    pdf.ln(4)

    pdf.set_font("Helvetica", "B", 12)
    pdf.cell(0, 8, "Route", ln=True)
    pdf.set_font("Helvetica", "", 10)
    if route:
        for index, department in enumerate(route, start=1):
            pdf.cell(0, 6, _latin1(f"{index}. {department}"), ln=True)
    else:
        pdf.cell(0, 6, "No route recorded", ln=True)

    pdf.ln(4)
    pdf.set_font("Helvetica", "B", 12)
    pdf.cell(0, 8, "Trail", ln=True)

    widths = (38, 28, 38, 38, 38)
    headers = ("Date", "Action", "From", "To", "By")
    pdf.set_font("Helvetica", "B", 9)
    pdf.set_fill_color(235, 235, 235)
    for width, header in zip(widths, headers):
        pdf.cell(width, 7, header, border=1, fill=True)
    pdf.ln()

    pdf.set_font("Helvetica", "", 9)
    for trail in trails:
        row = (
            trail.get("action_date") or "",
            trail.get("status") or "",
            trail.get("from_department_name") or "-",
            trail.get("to_department_name") or "-",
            trail.get("user_name") or "-",
        )
        for width, value in zip(widths, row):
            pdf.cell(width, 7, _latin1(str(value)[:24]), border=1)
        pdf.ln()

    return bytes(pdf.output())
