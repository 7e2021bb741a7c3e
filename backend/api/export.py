"""Export endpoints for CSV, PDF and JSON backup."""

import logging
import io
from datetime import date, datetime
from typing import Optional
from xml.sax.saxutils import escape
import pandas as pd
from fastapi import APIRouter, HTTPException, Request, Query
from fastapi.responses import StreamingResponse
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from backend.services import JsonFileStorage, PeriodAggregator
from backend.services.aggregator import VALUE_TIERS
from backend.services.projection import CURRENCY_SYMBOL, format_indian_number, project_annual

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/export", tags=["export"])

TIER_LABELS = {key: label for key, label, _ in VALUE_TIERS}

# DataFrame column -> export label, in export order
EXPORT_COLUMNS = [
    ("day", "Date"),
    ("start", "Start"),
    ("end", "End"),
    ("activity_name", "Activity"),
    ("tier_label", "Tier"),
    ("hourly_value", "Hourly Value"),
    ("block_value", "Slot Value"),
]


def get_storage(request: Request) -> JsonFileStorage:
    """Helper to get the local store created at startup."""
    return request.app.state.storage


def pdf_text(text: str) -> str:
    """Escape text for a Paragraph; the base PDF fonts have no rupee glyph."""
    return escape(text.replace(CURRENCY_SYMBOL, "Rs. "))


async def load_period(request: Request, period: str, day: Optional[date]):
    """
    Load the logs of a period as an export DataFrame.

    Returns:
        Tuple of (logs, DataFrame with EXPORT_COLUMNS, period start, period end)
    """
    try:
        start, end = PeriodAggregator.period_bounds(period, day)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        logs = await get_storage(request).get_logs_in_range(start, end)
    except Exception as e:
        logger.error(f"Error reading activity logs: {e}")
        raise HTTPException(status_code=500, detail="Failed to read activity logs")

    if not logs:
        raise HTTPException(status_code=404, detail="No activity logs found")

    df = PeriodAggregator.logs_to_dataframe(logs).sort_values("time_slot_start")
    df["day"] = df["time_slot_start"].dt.strftime("%Y-%m-%d")
    df["start"] = df["time_slot_start"].dt.strftime("%H:%M")
    df["end"] = df["time_slot_end"].dt.strftime("%H:%M")
    df["tier_label"] = df["tier"].map(TIER_LABELS)
    return logs, df.reset_index(drop=True), start, end


@router.get("/csv")
async def export_csv(
    request: Request,
    period: str = Query("week", description="day, week or month"),
    day: Optional[date] = Query(None, alias="date", description="Any date within the period"),
):
    """
    Export the activity logs of a period to CSV.

    Args:
        period: "day", "week" or "month"
        date: Any date within the period (default: today)

    Returns:
        CSV file with a totals row
    """
    logs, df, start, _ = await load_period(request, period, day)

    df_cols = [col for col, _ in EXPORT_COLUMNS]
    labels = dict(EXPORT_COLUMNS)
    df_export = df[df_cols].rename(columns=labels)

    # Add totals row
    totals = {label: "" for label in df_export.columns}
    totals["Date"] = "TOTAL"
    totals["Activity"] = f"{len(df_export)} slots"
    totals["Slot Value"] = df_export["Slot Value"].sum()

    totals_df = pd.DataFrame([totals], columns=df_export.columns)
    df_export = pd.concat([df_export, totals_df], ignore_index=True)

    # Generate CSV
    csv_buffer = io.StringIO()
    df_export.to_csv(csv_buffer, index=False)
    csv_buffer.seek(0)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filename = f"pine_{period}_{start.strftime('%Y%m%d')}_{timestamp}.csv"

    logger.info(f"Exported {len(logs)} activity logs to CSV")

    return StreamingResponse(
        iter([csv_buffer.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.get("/pdf")
async def export_pdf(
    request: Request,
    period: str = Query("week", description="day, week or month"),
    day: Optional[date] = Query(None, alias="date", description="Any date within the period"),
):
    """
    Export a period report to PDF.

    Args:
        period: "day", "week" or "month"
        date: Any date within the period (default: today)

    Returns:
        PDF file with summary statistics, value tiers and every logged slot
    """
    logs, df, start, end = await load_period(request, period, day)

    # Growth needs the preceding period too
    try:
        all_logs = await get_storage(request).get_all_logs()
    except Exception as e:
        logger.error(f"Error reading activity logs: {e}")
        raise HTTPException(status_code=500, detail="Failed to read activity logs")
    stats = PeriodAggregator.compute_stats(all_logs, period, day)

    pdf_buffer = io.BytesIO()
    doc = SimpleDocTemplate(pdf_buffer, pagesize=A4)
    elements = []

    styles = getSampleStyleSheet()
    title_style = styles["Title"]
    normal_style = styles["Normal"]

    elements.append(Paragraph("Pine - Time Value Report", title_style))
    elements.append(Spacer(1, 0.2 * inch))

    date_text = f"Period: {start.strftime('%d/%m/%Y')} to {end.strftime('%d/%m/%Y')}"
    elements.append(Paragraph(date_text, normal_style))
    elements.append(Spacer(1, 0.2 * inch))

    top = pdf_text(stats.top_activity.name) if stats.top_activity else "-"
    summary_text = f"""
    <b>Summary Statistics</b><br/>
    Logged Hours: {stats.total_hours:.1f}<br/>
    Total Value: {pdf_text(format_indian_number(stats.total_value))}<br/>
    Average Hourly Value: {pdf_text(format_indian_number(stats.avg_hourly_value))}<br/>
    Efficiency: {stats.efficiency}%<br/>
    High Value Hours: {stats.high_value_hours:.1f}<br/>
    Top Activity: {top}<br/>
    Growth: {stats.growth}%
    """
    elements.append(Paragraph(summary_text, normal_style))
    elements.append(Spacer(1, 0.3 * inch))

    table_style = TableStyle(
        [
            ("BACKGROUND", (0, 0), (-1, 0), colors.grey),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
            ("ALIGN", (0, 0), (-1, -1), "CENTER"),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, 0), 10),
            ("BOTTOMPADDING", (0, 0), (-1, 0), 12),
            ("GRID", (0, 0), (-1, -1), 1, colors.black),
            ("FONTSIZE", (0, 1), (-1, -1), 8),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.lightgrey]),
        ]
    )

    # Value tiers, skipping empty ones
    tier_data = [["Tier", "Hours", "Value", "Slots"]]
    for tier in stats.value_breakdown:
        if tier.activity_count:
            tier_data.append(
                [tier.label, f"{tier.hours:.1f}", f"{tier.value:,.0f}", str(tier.activity_count)]
            )
    tier_table = Table(tier_data, repeatRows=1)
    tier_table.setStyle(table_style)
    elements.append(tier_table)
    elements.append(Spacer(1, 0.3 * inch))

    # Logged slots
    table_data = [[label for _, label in EXPORT_COLUMNS]]
    for idx in range(len(df)):
        row = []
        for df_col, _ in EXPORT_COLUMNS:
            value = df[df_col].iloc[idx]
            if pd.isna(value):
                row.append("-")
            elif df_col == "activity_name":
                row.append(str(value)[:25])
            elif df_col in ("hourly_value", "block_value"):
                row.append(f"{value:,.0f}")
            else:
                row.append(str(value))
        table_data.append(row)

    table = Table(table_data, repeatRows=1)
    table.setStyle(table_style)
    elements.append(table)

    daily_average = stats.total_value / max((end.date() - start.date()).days + 1, 1)
    elements.append(Spacer(1, 0.2 * inch))
    elements.append(
        Paragraph(f"Annual projection at this daily average: {pdf_text(project_annual(daily_average))}", normal_style)
    )

    doc.build(elements)
    pdf_buffer.seek(0)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filename = f"pine_{period}_{start.strftime('%Y%m%d')}_{timestamp}.pdf"

    logger.info(f"Exported {len(logs)} activity logs to PDF")

    return StreamingResponse(
        pdf_buffer,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.get("/json")
async def export_json(request: Request):
    """Export every local record as a JSON backup."""
    try:
        data = await get_storage(request).export_all_data()
    except Exception as e:
        logger.error(f"Error exporting data: {e}")
        raise HTTPException(status_code=500, detail="Failed to export data")

    logger.info(f"Exported {len(data['activity_logs'])} activity logs to JSON")
    return data
