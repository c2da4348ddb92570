"""Flat-row report projections and spreadsheet writing.

Each report is a fixed list of named columns. Currency columns carry raw
numbers and date columns ISO strings, so the spreadsheet stays sortable.
"""

import logging
from collections.abc import Callable, Iterable, Sequence
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from coop_lending.engine.amounts import to_amount, to_int
from coop_lending.engine.disbursement import calculate_disbursement
from coop_lending.exceptions import ExportError
from coop_lending.models.lending import Customer, DocumentCategory, MarketingTarget

logger = logging.getLogger(__name__)

Row = dict[str, Any]
Column = tuple[str, Callable[[Any], Any]]


def _number(value: Any) -> int | float:
    amount = to_amount(value)
    return int(amount) if amount == amount.to_integral_value() else float(amount)


def _iso(value: date | None) -> str:
    return value.isoformat() if value else "-"


def _text(value: str | None) -> str:
    return value or "-"


NOMINATIVE_COLUMNS: tuple[Column, ...] = (
    ("Nama Nasabah", lambda c: c.personal.full_name),
    ("NOPEN", lambda c: c.pension.pension_number),
    ("NIK", lambda c: c.personal.nik),
    ("Plafon", lambda c: _number(c.nominative.loan_amount)),
    ("Tenor", lambda c: to_int(c.nominative.tenure_months)),
    ("Angsuran Bulanan", lambda c: _number(calculate_disbursement(c.nominative).total_monthly_payment)),
    ("Potongan Awal", lambda c: _number(calculate_disbursement(c.nominative).upfront_deductions)),
    ("Angsuran Dimuka", lambda c: _number(calculate_disbursement(c.nominative).prepaid_installments)),
    ("Alokasi Lain", lambda c: _number(calculate_disbursement(c.nominative).other_allocations)),
    ("Fee Marketing", lambda c: _number(c.nominative.marketing_fee)),
    ("Terima Bersih (Net)", lambda c: _number(calculate_disbursement(c.nominative).net_received)),
    ("Marketing", lambda c: _text(c.marketing_name)),
)

ARCHIVE_COLUMNS: tuple[Column, ...] = (
    ("Nama Pemilik SK", lambda c: c.personal.full_name),
    ("NOPEN", lambda c: c.pension.pension_number),
    ("Nomor SK Pensiun", lambda c: c.pension.sk_number),
    ("No SPK", lambda c: _text(c.nominative.spk_code)),
    ("Tgl Masuk (Arsip)", lambda c: _iso(c.pension.sk_received_date)),
    (
        "Status Tanda Terima",
        lambda c: "Ada File" if any(d.category == DocumentCategory.SK for d in c.documents) else "Belum Upload",
    ),
)

MASTER_COLUMNS: tuple[Column, ...] = (
    ("Status", lambda c: c.status.label),
    ("Nama Nasabah", lambda c: c.personal.full_name),
    ("NIK", lambda c: c.personal.nik),
    ("NOPEN", lambda c: c.pension.pension_number),
    ("Kantor Bayar", lambda c: _text(c.pension.former_institution)),
    ("Jenis Pensiun", lambda c: c.pension.pension_type.label),
    ("No SK", lambda c: _text(c.pension.sk_number)),
    ("Tgl Keluar SK", lambda c: _iso(c.pension.sk_issuance_date)),
    ("Tgl Terima Arsip", lambda c: _iso(c.pension.sk_received_date)),
    ("Plafon", lambda c: _number(c.nominative.loan_amount)),
    ("Tenor", lambda c: to_int(c.nominative.tenure_months)),
    ("Angsuran", lambda c: _number(c.nominative.monthly_installment)),
    ("Simp Wajib", lambda c: _number(c.nominative.mandatory_savings)),
    ("Total Potongan", lambda c: _number(calculate_disbursement(c.nominative).upfront_deductions)),
    ("Angsuran Dimuka", lambda c: _number(calculate_disbursement(c.nominative).prepaid_installments)),
    ("Pelunasan Lama", lambda c: _number(c.nominative.repayment_amount)),
    ("Terima Bersih (Net)", lambda c: _number(calculate_disbursement(c.nominative).net_received)),
    ("Tgl Cair", lambda c: _iso(c.nominative.disbursement_date)),
    ("Marketing", lambda c: _text(c.marketing_name)),
    ("Catatan Arsip", lambda c: _text(c.pension.sk_description)),
)

SETTLED_COLUMNS: tuple[Column, ...] = (
    ("Nama Nasabah", lambda c: c.personal.full_name),
    ("NOPEN", lambda c: c.pension.pension_number),
    ("Status Akhir", lambda c: c.status.label),
    ("Tanggal Selesai", lambda c: _iso(c.resolution_date)),
    ("Plafon Terakhir", lambda c: _number(c.nominative.loan_amount)),
    ("Nominal Pelunasan", lambda c: _number(c.resolution_amount)),
    ("Catatan Penutupan", lambda c: _text(c.resolution_notes)),
)

MARKETING_COLUMNS: tuple[Column, ...] = (
    ("Marketing", lambda t: t.name),
    ("Cabang", lambda t: t.branch),
    ("NOA", lambda t: t.noa),
    ("Minggu 1", lambda t: _number(t.week_totals[0])),
    ("Minggu 2", lambda t: _number(t.week_totals[1])),
    ("Minggu 3", lambda t: _number(t.week_totals[2])),
    ("Minggu 4", lambda t: _number(t.week_totals[3])),
    ("Minggu 5", lambda t: _number(t.week_totals[4])),
    ("Realisasi", lambda t: _number(t.realization)),
    ("Sisa Target", lambda t: _number(t.remaining)),
    ("Target", lambda t: _number(t.target_amount)),
    ("Persentase", lambda t: f"{t.achievement_pct.quantize(Decimal('0.01'))}%"),
)

REPORTS: dict[str, tuple[str, tuple[Column, ...]]] = {
    "nominative": ("Database Nasabah", NOMINATIVE_COLUMNS),
    "archive": ("Arsip Dokumen", ARCHIVE_COLUMNS),
    "master": ("Master Database KJAM", MASTER_COLUMNS),
    "settled": ("Nasabah Lunas", SETTLED_COLUMNS),
    "marketing": ("Penyaluran Marketing", MARKETING_COLUMNS),
}


def project_rows(records: Iterable[Any], columns: Sequence[Column]) -> list[Row]:
    """Project records onto numbered rows with the given columns."""
    rows = []
    for index, record in enumerate(records, start=1):
        row: Row = {"No": index}
        for header, getter in columns:
            row[header] = getter(record)
        rows.append(row)
    return rows


def nominative_rows(customers: Iterable[Customer]) -> list[Row]:
    return project_rows(customers, NOMINATIVE_COLUMNS)


def archive_rows(customers: Iterable[Customer]) -> list[Row]:
    return project_rows(customers, ARCHIVE_COLUMNS)


def master_rows(customers: Iterable[Customer]) -> list[Row]:
    return project_rows(customers, MASTER_COLUMNS)


def settled_rows(customers: Iterable[Customer]) -> list[Row]:
    return project_rows(customers, SETTLED_COLUMNS)


def marketing_rows(targets: Iterable[MarketingTarget]) -> list[Row]:
    return project_rows(targets, MARKETING_COLUMNS)


def report_rows(report: str, records: Iterable[Any]) -> list[Row]:
    """Rows for a named report (nominative, archive, master, settled, marketing)."""
    if report not in REPORTS:
        raise ExportError(f"Unknown report {report!r}; expected one of {sorted(REPORTS)}")
    return project_rows(records, REPORTS[report][1])


def export_filename(prefix: str, today: date) -> str:
    return f"{prefix}_{today.isoformat()}.xlsx"


def write_workbook(
    rows: Sequence[Row],
    sheet_name: str,
    path: str | Path,
    column_width: int = 20,
) -> Path:
    """Write rows to a single-sheet .xlsx file.

    Parameters
    ----------
    rows : Sequence[Row]
        Flat rows sharing the same keys; the first row's keys are the header.
    sheet_name : str
        Worksheet title (truncated to Excel's 31 characters).
    path : str | Path
        Destination file.
    column_width : int
        Width applied to every column.

    Returns
    -------
    Path
        The written file.

    Raises
    ------
    ExportError
        If there is nothing to export or the file cannot be written.
    """
    if not rows:
        raise ExportError("No data to export")

    headers = list(rows[0].keys())
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = sheet_name[:31]

    worksheet.append(headers)
    for cell in worksheet[1]:
        cell.font = Font(bold=True)
    for row in rows:
        worksheet.append([row.get(header) for header in headers])

    for idx in range(1, len(headers) + 1):
        worksheet.column_dimensions[get_column_letter(idx)].width = column_width

    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        workbook.save(path)
    except OSError as exc:
        raise ExportError(f"Failed to write {path}: {exc}") from exc

    logger.info("Exported %d rows to %s", len(rows), path)
    return path
