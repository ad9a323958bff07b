"""CSV builders shared by the import tests."""
import csv
import io

RESULT_HEADER = [
    "St_Id", "ENROLLMENT_NO", "extype", "examid", "exam", "DECLARATIONDATE", "AcademicYear", "sem",
    "name", "instcode", "instName", "CourseName", "BR_CODE", "BR_NAME",
    "SUB1", "SUB1NA", "SUB1CR", "SUB1GR", "BCK1",
    "SUB2", "SUB2NA", "SUB2CR", "SUB2GR", "BCK2",
    "SUB3", "SUB3NA", "SUB3CR", "SUB3GR", "BCK3",
    "SPI_TOTCR", "SPI_ERTOTCR", "SPI", "CPI", "CGPA", "RESULT", "TRIAL", "REMARK",
]

ROSTER_HEADER = [
    "map_number", "Name", "BR_CODE", "SEM1", "SEM2", "SEM3", "SEM4", "SEM5", "SEM6", "SEM7", "SEM8",
    "Email", "Gender", "DOB", "Category", "Mobile", "IS_COMPLETE", "TERM_CLOSE", "IS_CANCEL", "IS_PASS_ALL",
]


def result_row(enrollment_no, exam_id=101, **overrides):
    row = {
        "St_Id": f"ST{enrollment_no}",
        "ENROLLMENT_NO": enrollment_no,
        "extype": "REGULAR",
        "examid": str(exam_id),
        "exam": "BE SEM 5 - Winter 2024",
        "DECLARATIONDATE": "2024-05-31",
        "AcademicYear": "2023-24",
        "sem": "5",
        "name": "Patel Asha",
        "instcode": "17",
        "instName": "Government Engineering College",
        "CourseName": "BE",
        "BR_CODE": "7",
        "BR_NAME": "Computer Engineering",
        "SUB1": "3150703", "SUB1NA": "Analysis and Design of Algorithms", "SUB1CR": "5", "SUB1GR": "AB", "BCK1": "0",
        "SUB2": "3150709", "SUB2NA": "Professional Ethics", "SUB2CR": "3", "SUB2GR": "BC", "BCK2": "0",
        "SUB3": "", "SUB3NA": "", "SUB3CR": "", "SUB3GR": "", "BCK3": "",
        "SPI_TOTCR": "8",
        "SPI_ERTOTCR": "8",
        "SPI": "8.25",
        "CPI": "7.9",
        "CGPA": "7.9",
        "RESULT": "PASS",
        "TRIAL": "1",
        "REMARK": "",
    }
    row.update(overrides)
    return row


def roster_row(enrollment_no, name="Sharma Rahul Kumar", dept="CE", semesters=(), **overrides):
    row = {
        "map_number": enrollment_no,
        "Name": name,
        "BR_CODE": dept,
        "Email": "rahul@example.com",
        "Gender": "M",
        "DOB": "2005-02-14",
        "Category": "OPEN",
        "Mobile": "9876543210",
        "IS_COMPLETE": "0",
        "TERM_CLOSE": "0",
        "IS_CANCEL": "0",
        "IS_PASS_ALL": "0",
    }
    for number in range(1, 9):
        row[f"SEM{number}"] = semesters[number - 1] if number <= len(semesters) else ""
    row.update(overrides)
    return row


def to_csv(rows, header):
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=header, lineterminator="\n", extrasaction="ignore")
    writer.writeheader()
    writer.writerows(rows)
    return buf.getvalue().encode("utf-8")
