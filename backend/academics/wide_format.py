"""Wide-row format of the university results extract.

A results row carries exam metadata, up to ``SUBJECT_SLOTS`` subjects spread
over numbered column groups, and the aggregate columns. Import and export both
go through the column tables below, so the two directions cannot drift apart.
"""
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from .derivation import ENROLLMENT_MAX_LENGTH
from .ingest.helpers import cell, parse_excel_date, parse_float_cell, parse_int_cell
from .ingest.report import RowResult

__all__ = [
    'SUBJECT_SLOTS', 'BACKLOG_SENTINEL', 'SubjectSlotSchema', 'RESULT_SUBJECTS',
    'ResultCandidate', 'normalize_result_row', 'result_to_wide_row', 'export_header',
    'has_component_grades',
]

SUBJECT_SLOTS = 15
BACKLOG_SENTINEL = "1"
# exam ids are stored in a 32-bit integer column
EXAM_ID_MAX = 2**31 - 1
UPLOAD_BATCH_COLUMN = "uploadBatch"


@dataclass(frozen=True)
class SubjectSlotSchema:
    slots: int = SUBJECT_SLOTS
    code: str = "SUB{i}"
    name: str = "SUB{i}NA"
    credits: str = "SUB{i}CR"
    grade: str = "SUB{i}GR"
    backlog: str = "BCK{i}"
    # optional per-subject component grades: (subject key, column template)
    components: Tuple[Tuple[str, str], ...] = (
        ("theory_ese_grade", "SUB{i}TH_ESE"),
        ("theory_pa_grade", "SUB{i}TH_PA"),
        ("theory_total_grade", "SUB{i}TH_TOT"),
        ("practical_ese_grade", "SUB{i}PR_ESE"),
        ("practical_pa_grade", "SUB{i}PR_PA"),
        ("practical_total_grade", "SUB{i}PR_TOT"),
    )

    def core_columns(self, i) -> List[str]:
        return [t.format(i=i) for t in (self.code, self.name, self.credits, self.grade, self.backlog)]

    def columns(self, include_components=False) -> List[str]:
        out = []
        for i in range(1, self.slots + 1):
            out.extend(self.core_columns(i))
            if include_components:
                out.extend(t.format(i=i) for _, t in self.components)
        return out

    def read(self, row) -> List[dict]:
        """Subjects of a raw row in slot order; a slot without code or name is skipped."""
        subjects = []
        for i in range(1, self.slots + 1):
            code = cell(row, self.code.format(i=i))
            name = cell(row, self.name.format(i=i))
            if not code or not name:
                continue
            subject = {
                "code": code,
                "name": name,
                "credits": max(0, parse_int_cell(row.get(self.credits.format(i=i)), 0)),
                "grade": cell(row, self.grade.format(i=i)) or "",
                "is_backlog": cell(row, self.backlog.format(i=i)) == BACKLOG_SENTINEL,
            }
            for key, template in self.components:
                value = cell(row, template.format(i=i))
                if value:
                    subject[key] = value
            subjects.append(subject)
        return subjects

    def write(self, subjects, include_components=False) -> Dict[str, str]:
        """Inverse of ``read``: subject ``n`` of the list goes to slot ``n``."""
        out = {column: "" for column in self.columns(include_components)}
        for i, subject in enumerate(subjects[:self.slots], start=1):
            out[self.code.format(i=i)] = subject.get("code") or ""
            out[self.name.format(i=i)] = subject.get("name") or ""
            out[self.credits.format(i=i)] = str(int(subject.get("credits") or 0))
            out[self.grade.format(i=i)] = subject.get("grade") or ""
            out[self.backlog.format(i=i)] = "1" if subject.get("is_backlog") else "0"
            if include_components:
                for key, template in self.components:
                    out[template.format(i=i)] = subject.get(key) or ""
        return out


RESULT_SUBJECTS = SubjectSlotSchema()


def _text(row, column):
    return cell(row, column) or ""


def _int(default=0) -> Callable:
    return lambda row, column: parse_int_cell(row.get(column), default)


def _float(row, column):
    return parse_float_cell(row.get(column), 0.0)


def _date(row, column):
    return parse_excel_date(cell(row, column))


@dataclass(frozen=True)
class ResultColumn:
    column: str
    field: str
    parse: Callable = _text


# (enrollment_no, exam_id) are the natural key and are read separately
METADATA_COLUMNS = (
    ResultColumn("St_Id", "st_id"),
    ResultColumn("ENROLLMENT_NO", "enrollment_no"),
    ResultColumn("extype", "exam_type"),
    ResultColumn("examid", "exam_id", _int()),
    ResultColumn("exam", "exam_name"),
    ResultColumn("DECLARATIONDATE", "declaration_date", _date),
    ResultColumn("AcademicYear", "academic_year"),
    ResultColumn("sem", "semester", _int()),
    ResultColumn("MAP_NUMBER", "map_number", _float),
    ResultColumn("UNIT_NO", "unit_no", _float),
    ResultColumn("EXAMNUMBER", "exam_number", _float),
    ResultColumn("name", "student_name"),
    ResultColumn("instcode", "inst_code", _int()),
    ResultColumn("instName", "inst_name"),
    ResultColumn("CourseName", "course_name"),
    ResultColumn("BR_CODE", "branch_code", _int()),
    ResultColumn("BR_NAME", "branch_name"),
)

AGGREGATE_COLUMNS = (
    ResultColumn("SPI_TOTCR", "total_credits", _int()),
    ResultColumn("SPI_ERTOTCR", "earned_credits", _int()),
    ResultColumn("SPI", "spi", _float),
    ResultColumn("CPI", "cpi", _float),
    ResultColumn("CGPA", "cgpa", _float),
    ResultColumn("RESULT", "result"),
    ResultColumn("TRIAL", "trials", _int(1)),
    ResultColumn("REMARK", "remark"),
)

KEY_FIELDS = ("enrollment_no", "exam_id")


@dataclass
class ResultCandidate:
    enrollment_no: str
    exam_id: int
    fields: dict = field(default_factory=dict)
    subjects: List[dict] = field(default_factory=list)

    @property
    def key(self):
        return f"{self.enrollment_no}/{self.exam_id}"

    def defaults(self, upload_batch: Optional[str]) -> dict:
        return {**self.fields, "subjects": self.subjects, "upload_batch": upload_batch}


def normalize_result_row(row, row_number, schema=RESULT_SUBJECTS) -> RowResult:
    enrollment_no = cell(row, "ENROLLMENT_NO") or cell(row, "St_Id")
    if not enrollment_no:
        return RowResult.fail(row_number, "Missing enrollment number (ENROLLMENT_NO or St_Id)")
    if len(enrollment_no) > ENROLLMENT_MAX_LENGTH:
        return RowResult.fail(row_number, f"Enrollment number longer than {ENROLLMENT_MAX_LENGTH} characters",
                              key=enrollment_no)
    raw_exam_id = cell(row, "examid")
    exam_id = parse_int_cell(raw_exam_id, None)
    if exam_id is None:
        message = "Missing exam id (examid)" if raw_exam_id is None else f"Invalid exam id {raw_exam_id!r}"
        return RowResult.fail(row_number, message, key=enrollment_no)
    if not 0 < exam_id <= EXAM_ID_MAX:
        return RowResult.fail(row_number, f"Exam id {exam_id} out of range", key=enrollment_no)

    fields = {}
    for column in METADATA_COLUMNS + AGGREGATE_COLUMNS:
        if column.field in KEY_FIELDS:
            continue
        fields[column.field] = column.parse(row, column.column)
    return RowResult.ok(row_number, ResultCandidate(
        enrollment_no=enrollment_no,
        exam_id=exam_id,
        fields=fields,
        subjects=schema.read(row),
    ))


def has_component_grades(subjects) -> bool:
    keys = {key for key, _ in RESULT_SUBJECTS.components}
    return any(keys.intersection(subject) for subject in subjects or [])


def export_header(include_components=False, schema=RESULT_SUBJECTS) -> List[str]:
    return ([c.column for c in METADATA_COLUMNS]
            + schema.columns(include_components)
            + [c.column for c in AGGREGATE_COLUMNS]
            + [UPLOAD_BATCH_COLUMN])


def _format(value) -> str:
    if value is None:
        return ""
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def result_to_wide_row(result, include_components=False, schema=RESULT_SUBJECTS) -> Dict[str, str]:
    """Flatten a stored ExamResult back into the import column layout."""
    out = {}
    for column in METADATA_COLUMNS:
        out[column.column] = _format(getattr(result, column.field))
    out.update(schema.write(result.subjects or [], include_components))
    for column in AGGREGATE_COLUMNS:
        out[column.column] = _format(getattr(result, column.field))
    out[UPLOAD_BATCH_COLUMN] = result.upload_batch or ""
    return out
