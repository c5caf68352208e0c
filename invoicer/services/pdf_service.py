# INVOICER/backend/invoicer/services/pdf_service.py : facture imprimable

import io
import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer

from invoicer.config import CURRENCY
from invoicer.constants import TAX_RATE, STATUS_LABELS
from invoicer.models import models

logger = logging.getLogger(__name__)


def format_money(amount, currency: str = CURRENCY) -> str:
    """Formate un montant ('Rp 222.000' pour la roupie, '1,234.50 EUR' sinon)"""
    value = Decimal(amount)
    if currency == "IDR":
        # Pas de décimales, points comme séparateurs de milliers
        return "Rp " + f"{value:,.0f}".replace(",", ".")
    return f"{value:,.2f} {currency}"

def _text(value: Optional[str]) -> str:
    return escape(value or "")

def generate_invoice_pdf(invoice: models.Invoice, profile: Optional[models.BusinessProfile] = None) -> bytes:
    """
    Génère le PDF d'une facture.

    Args:
        invoice: facture avec son client et ses lignes
        profile: profil de l'entreprise (en-tête et comptes bancaires), optionnel

    Returns:
        contenu du PDF
    """
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, topMargin=0.5*inch, bottomMargin=0.5*inch)
    elements = []
    styles = getSampleStyleSheet()

    title_style = ParagraphStyle(
        'InvoiceTitle',
        parent=styles['Heading1'],
        fontSize=24,
        alignment=TA_CENTER,
        spaceAfter=6
    )
    heading_style = ParagraphStyle(
        'InvoiceHeading',
        parent=styles['Heading2'],
        fontSize=12,
        spaceAfter=4
    )
    normal_style = styles['Normal']

    # En-tête
    elements.append(Paragraph("INVOICE", title_style))
    elements.append(Paragraph(f"#{_text(invoice.number)}", ParagraphStyle('Number', parent=normal_style, alignment=TA_CENTER, fontSize=14)))
    elements.append(Spacer(1, 0.3*inch))

    # Émetteur / destinataire
    if profile:
        sender = (
            f"<b>{_text(profile.business_name)}</b><br/>{_text(profile.address)}<br/>"
            f"Email: {_text(profile.email)}<br/>Tel: {_text(profile.phone)}"
        )
        if profile.tax_id:
            sender += f"<br/>NPWP: {_text(profile.tax_id)}"
    else:
        sender = "-"

    customer = invoice.customer
    recipient = f"<b>{_text(customer.name)}</b><br/>{_text(customer.email)}"
    if customer.phone:
        recipient += f"<br/>{_text(customer.phone)}"
    recipient += f"<br/>{_text(customer.address)}"

    parties = Table([
        [Paragraph("<b>From:</b>", heading_style), Paragraph("<b>Bill to:</b>", heading_style)],
        [Paragraph(sender, normal_style), Paragraph(recipient, normal_style)]
    ], colWidths=[3.4*inch, 3.4*inch])
    parties.setStyle(TableStyle([('VALIGN', (0, 0), (-1, -1), 'TOP')]))
    elements.append(parties)
    elements.append(Spacer(1, 0.2*inch))

    status = STATUS_LABELS.get(invoice.status, invoice.status)
    elements.append(Paragraph(
        f"<b>Date:</b> {invoice.issue_date.strftime('%d/%m/%Y')} &nbsp;&nbsp; "
        f"<b>Due:</b> {invoice.due_date.strftime('%d/%m/%Y')} &nbsp;&nbsp; "
        f"<b>Status:</b> {_text(status)}",
        normal_style
    ))
    elements.append(Spacer(1, 0.2*inch))

    # Lignes
    table_data = [['Item', 'Qty', 'Price', 'Total']]
    for item in invoice.items:
        name = item.product.name if item.product else f"#{item.product_id}"
        table_data.append([
            Paragraph(_text(name), normal_style),
            str(item.quantity),
            format_money(item.price),
            format_money(item.total)
        ])

    tax_percent = (TAX_RATE * 100).normalize()
    table_data.append(['', '', 'Subtotal', format_money(invoice.subtotal)])
    table_data.append(['', '', f'Tax ({tax_percent}%)', format_money(invoice.tax_amount)])
    table_data.append(['', '', 'Total', format_money(invoice.total_amount)])

    item_rows = len(invoice.items)
    table = Table(table_data, colWidths=[3.2*inch, 0.8*inch, 1.4*inch, 1.4*inch])
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.grey),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('ALIGN', (1, 0), (-1, -1), 'RIGHT'),
        ('GRID', (0, 0), (-1, item_rows), 0.5, colors.grey),
        ('LINEABOVE', (2, -1), (-1, -1), 1, colors.black),
        ('FONTNAME', (2, -1), (-1, -1), 'Helvetica-Bold'),
    ]))
    elements.append(table)
    elements.append(Spacer(1, 0.3*inch))

    if invoice.notes:
        elements.append(Paragraph("<b>Notes:</b>", heading_style))
        elements.append(Paragraph(_text(invoice.notes), normal_style))
        elements.append(Spacer(1, 0.2*inch))

    # Coordonnées bancaires pour le paiement
    accounts = (profile.bank_accounts or []) if profile else []
    if accounts:
        elements.append(Paragraph("<b>Payment details:</b>", heading_style))
        for account in accounts:
            elements.append(Paragraph(
                f"{_text(account.get('bankName'))} - {_text(account.get('accountNumber'))} "
                f"a/n {_text(account.get('accountName'))}",
                normal_style
            ))

    footer_style = ParagraphStyle('Footer', parent=normal_style, fontSize=8, textColor=colors.grey, alignment=TA_CENTER)
    elements.append(Spacer(1, 0.4*inch))
    elements.append(Paragraph(f"Generated on {datetime.now().strftime('%d/%m/%Y %H:%M')}", footer_style))

    doc.build(elements)
    logger.info(f"PDF généré pour la facture {invoice.number}")
    return buffer.getvalue()
