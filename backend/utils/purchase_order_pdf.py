from fpdf import FPDF
from fpdf.enums import XPos, YPos
import os
import re
import logging

from config import Settings, CompanyInfo
from models.purchase_orders import PurchaseOrder
from utils import local_now
from utils.formatting import format_amount, format_quantity

logger = logging.getLogger(__name__)

# (header, width in mm, alignment) for the line table; widths add up to the A4 text width
LINE_COLUMNS = [
    ("No.", 10, "C"),
    ("Item", 45, "L"),
    ("Specification", 40, "L"),
    ("Unit", 15, "C"),
    ("Qty", 15, "R"),
    ("Unit Price", 30, "R"),
    ("Amount", 35, "R"),
]

_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\s]+')


def safe_filename_part(value: str) -> str:
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", (value or "").strip()).strip("_")
    return cleaned or "order"


def purchase_order_pdf_filename(db_po: PurchaseOrder) -> str:
    return f"{safe_filename_part(db_po.project_name)}_purchase_order_{local_now():%Y%m%d}_{db_po.id}.pdf"


def purchase_order_attachment_name(db_po: PurchaseOrder) -> str:
    return f"{safe_filename_part(db_po.project_name)}_purchase_order_{db_po.order_number}.pdf"


class PurchaseOrderPDF(FPDF):
    """A4 purchase order.

    The built-in Helvetica font only covers latin-1; set PDF_FONT_PATH to a
    TTF font (e.g. NanumGothic) to render Korean text.
    """

    def __init__(self, company: CompanyInfo, font_path: str = None):
        super().__init__(orientation="P", unit="mm", format="A4")
        self.company = company
        self.font_name = "Helvetica"
        self.unicode_font = False
        if font_path:
            if os.path.exists(font_path):
                self.add_font("Body", "", font_path)
                self.add_font("Body", "B", font_path)
                self.font_name = "Body"
                self.unicode_font = True
            else:
                logger.warning(f"PDF font {font_path} not found, falling back to Helvetica")
        self.set_auto_page_break(auto=True, margin=20)

    def clean(self, value) -> str:
        text = "" if value is None else str(value)
        if self.unicode_font:
            return text
        return text.encode("latin-1", "replace").decode("latin-1")

    def fit(self, value, width: float) -> str:
        """Shorten text so it fits in a cell of the given width."""
        text = self.clean(value)
        limit = width - 2
        if self.get_string_width(text) <= limit:
            return text
        while text and self.get_string_width(text + "..") > limit:
            text = text[:-1]
        return text + ".."

    def header(self):
        self.set_font(self.font_name, "B", 18)
        self.cell(0, 12, "PURCHASE ORDER", align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.set_font(self.font_name, "", 9)
        self.cell(0, 5, self.clean(self.company.name), align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.ln(4)

    def footer(self):
        self.set_y(-15)
        self.set_font(self.font_name, "", 8)
        self.cell(0, 10, f"Page {self.page_no()}", align="C")

    def info_row(self, left_label, left_value, right_label, right_value):
        self.set_font(self.font_name, "B", 9)
        self.cell(30, 7, self.clean(left_label), border=1, fill=True)
        self.set_font(self.font_name, "", 9)
        self.cell(65, 7, self.fit(left_value, 65), border=1)
        self.set_font(self.font_name, "B", 9)
        self.cell(30, 7, self.clean(right_label), border=1, fill=True)
        self.set_font(self.font_name, "", 9)
        self.cell(65, 7, self.fit(right_value, 65), border=1, new_x=XPos.LMARGIN, new_y=YPos.NEXT)


def render_purchase_order(db_po: PurchaseOrder, company: CompanyInfo, font_path: str = None) -> PurchaseOrderPDF:
    pdf = PurchaseOrderPDF(company, font_path=font_path)
    pdf.add_page()
    pdf.set_fill_color(235, 240, 250)

    # Order information
    pdf.info_row("Order No.", db_po.order_number, "Order Date", db_po.order_date.strftime("%Y-%m-%d"))
    pdf.info_row("Project", db_po.project_name, "Manager", db_po.manager)
    pdf.info_row("Contact", db_po.contact_number, "Delivery Date",
                 db_po.expected_delivery_date.strftime("%Y-%m-%d") if db_po.expected_delivery_date else "")
    pdf.info_row("Vendor", db_po.vendor_name, "Vendor Contact", db_po.vendor_contact)
    pdf.info_row("Vendor Email", db_po.vendor_email, "Buyer Phone", company.phone)
    pdf.ln(6)

    # Lines
    pdf.set_font(pdf.font_name, "B", 9)
    for title, width, _ in LINE_COLUMNS:
        pdf.cell(width, 8, title, border=1, align="C", fill=True)
    pdf.ln()

    pdf.set_font(pdf.font_name, "", 9)
    for index, line in enumerate(db_po.items, start=1):
        values = [
            index,
            line.item_name,
            line.specification,
            line.unit_type,
            format_quantity(line.quantity),
            format_amount(line.unit_price) if line.unit_price is not None else "",
            format_amount(line.amount),
        ]
        for value, (_, width, align) in zip(values, LINE_COLUMNS):
            pdf.cell(width, 7, pdf.fit(value, width), border=1, align=align)
        pdf.ln()

    total_label_width = sum(width for _, width, _ in LINE_COLUMNS[:-1])
    pdf.set_font(pdf.font_name, "B", 10)
    pdf.cell(total_label_width, 8, "Total (KRW)", border=1, align="R", fill=True)
    pdf.cell(LINE_COLUMNS[-1][1], 8, format_amount(db_po.total_amount), border=1, align="R",
             new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    if db_po.notes:
        pdf.ln(4)
        pdf.set_font(pdf.font_name, "B", 9)
        pdf.cell(0, 6, "Notes", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_font(pdf.font_name, "", 9)
        pdf.multi_cell(0, 5, pdf.clean(db_po.notes), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    # Signature block
    pdf.ln(12)
    pdf.set_font(pdf.font_name, "", 9)
    for text in filter(None, [company.name, company.address, company.phone and f"Tel. {company.phone}"]):
        pdf.cell(0, 5, pdf.clean(text), align="R", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(8)
    signer = company.representative or db_po.manager
    pdf.cell(0, 6, pdf.clean(f"Authorized by: {signer}    (Signature)"), align="R",
             new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    return pdf


def generate_purchase_order_pdf(db_po: PurchaseOrder, settings: Settings) -> str:
    """
    Renders the purchase order to a file in the configured output directory.

    Args:
        db_po: The purchase order, with its items loaded.
        settings: Current settings (company info, output directory, font).

    Returns:
        The path to the generated PDF file.
    """
    os.makedirs(settings.pdf_output_dir, exist_ok=True)
    pdf = render_purchase_order(db_po, settings.company, font_path=settings.pdf_font_path)
    filepath = os.path.join(settings.pdf_output_dir, purchase_order_pdf_filename(db_po))
    pdf.output(filepath)
    logger.info(f"PDF for Purchase Order {db_po.order_number} written to {filepath}")
    return filepath
