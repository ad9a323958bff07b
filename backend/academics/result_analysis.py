"""Branch-wise result analysis over imported exam results."""
import logging

import pandas as pd

from .ingest.results import filter_results

logger = logging.getLogger(__name__)

PASS_RESULT = "PASS"
DISTINCTION_SPI = 8.5
FIRST_CLASS_SPI = 7.0
SECOND_CLASS_SPI = 6.0

ANALYSIS_COLUMNS = [
    "branch_name", "semester", "total_students", "pass_count", "distinction_count",
    "first_class_count", "second_class_count", "average_spi", "average_cpi", "pass_percentage",
]


def branch_analysis(*, academic_year=None, exam_id=None, upload_batch=None):
    """Per (branch, semester) pass and class counts with SPI/CPI averages, sorted by branch then semester."""
    records = list(
        filter_results(academic_year=academic_year, exam_id=exam_id, upload_batch=upload_batch)
        .values("branch_name", "semester", "result", "spi", "cpi")
    )
    if not records:
        return []
    df = pd.DataFrame.from_records(records)
    spi = df["spi"].fillna(0)
    df["passed"] = df["result"].fillna("").str.strip().str.upper().eq(PASS_RESULT)
    df["distinction"] = spi >= DISTINCTION_SPI
    df["first_class"] = (spi >= FIRST_CLASS_SPI) & (spi < DISTINCTION_SPI)
    df["second_class"] = (spi >= SECOND_CLASS_SPI) & (spi < FIRST_CLASS_SPI)

    summary = (df.groupby(["branch_name", "semester"], sort=True)
               .agg(total_students=("result", "size"),
                    pass_count=("passed", "sum"),
                    distinction_count=("distinction", "sum"),
                    first_class_count=("first_class", "sum"),
                    second_class_count=("second_class", "sum"),
                    average_spi=("spi", "mean"),
                    average_cpi=("cpi", "mean"))
               .reset_index())
    summary["pass_percentage"] = summary["pass_count"] / summary["total_students"] * 100

    rows = []
    for rec in summary.to_dict(orient="records"):
        rows.append({
            "branch_name": rec["branch_name"],
            "semester": int(rec["semester"]),
            "total_students": int(rec["total_students"]),
            "pass_count": int(rec["pass_count"]),
            "distinction_count": int(rec["distinction_count"]),
            "first_class_count": int(rec["first_class_count"]),
            "second_class_count": int(rec["second_class_count"]),
            "average_spi": round(float(rec["average_spi"]), 2),
            "average_cpi": round(float(rec["average_cpi"]), 2),
            "pass_percentage": round(float(rec["pass_percentage"]), 2),
        })
    logger.debug("Branch analysis produced %s groups from %s results", len(rows), len(records))
    return rows


def write_analysis_workbook(rows, output):
    """Write ``rows`` to ``output`` (path or binary file object) as a one-sheet workbook."""
    df = pd.DataFrame(rows, columns=ANALYSIS_COLUMNS)
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Branch Analysis")
