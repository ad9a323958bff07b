from datetime import timedelta
from unittest import mock

from django.db import OperationalError
from django.test import TestCase
from django.utils import timezone

from ..batches import delete_upload_batch, list_upload_batches
from ..domain_logs import ImportRunLog
from ..domain_result import ExamResult
from ..exceptions import PersistenceError, StructuralError
from ..ingest import results as results_module
from ..ingest.decoder import decode_tabular
from ..ingest.results import export_results, import_results
from ..wide_format import normalize_result_row
from .builders import RESULT_HEADER, result_row, to_csv

VOLATILE_FIELDS = {"id", "upload_batch", "created_at", "updated_at"}


def snapshot():
    return {
        (r["enrollment_no"], r["exam_id"]): {k: v for k, v in r.items() if k not in VOLATILE_FIELDS}
        for r in ExamResult.objects.values()
    }


class ResultImportTests(TestCase):
    def test_import_creates_results_with_subjects(self):
        report = import_results(to_csv([result_row("20230001"), result_row("20230002")], RESULT_HEADER), "r.csv")
        self.assertEqual(report.processed_count, 2)
        self.assertEqual(report.total_rows, 2)
        self.assertEqual(report.errors, [])
        self.assertTrue(report.batch_id)
        result = ExamResult.objects.get(enrollment_no="20230001", exam_id=101)
        self.assertEqual(result.upload_batch, report.batch_id)
        self.assertEqual(result.spi, 8.25)
        self.assertEqual([s["code"] for s in result.subjects], ["3150703", "3150709"])
        self.assertEqual(result.subjects[0]["credits"], 5)

    def test_reimport_is_idempotent(self):
        content = to_csv([result_row(f"2023{n:04d}") for n in range(1, 6)], RESULT_HEADER)
        first = import_results(content, "r.csv")
        before = snapshot()
        second = import_results(content, "r.csv")
        self.assertEqual(first.created_count, 5)
        self.assertEqual(second.created_count, 0)
        self.assertEqual(second.updated_count, 5)
        self.assertEqual(ExamResult.objects.count(), 5)
        self.assertEqual(snapshot(), before)
        self.assertNotEqual(first.batch_id, second.batch_id)
        self.assertEqual(set(ExamResult.objects.values_list("upload_batch", flat=True)), {second.batch_id})

    def test_same_student_different_exams_are_separate_results(self):
        import_results(to_csv([result_row("20230001", 101), result_row("20230001", 102)], RESULT_HEADER))
        self.assertEqual(ExamResult.objects.filter(enrollment_no="20230001").count(), 2)

    def test_reimport_updates_in_place(self):
        import_results(to_csv([result_row("20230001")], RESULT_HEADER))
        import_results(to_csv([result_row("20230001", SPI="9.5", BCK1="1")], RESULT_HEADER))
        result = ExamResult.objects.get()
        self.assertEqual(result.spi, 9.5)
        self.assertTrue(result.subjects[0]["is_backlog"])
        self.assertEqual(result.backlog_count, 1)

    def test_partial_failure_is_contained(self):
        rows = []
        for n in range(1, 101):
            rows.append(result_row(f"2023{n:04d}", examid="" if n in (10, 50, 90) else "101"))
        report = import_results(to_csv(rows, RESULT_HEADER), "big.csv")
        self.assertEqual(report.total_rows, 100)
        self.assertEqual(report.processed_count, 97)
        self.assertEqual([e.row for e in report.errors], [10, 50, 90])
        self.assertEqual(ExamResult.objects.count(), 97)
        log = ImportRunLog.objects.get()
        self.assertEqual((log.status, log.processed_count, log.error_count), ("partial", 97, 3))

    def test_structural_error_writes_nothing(self):
        with self.assertRaises(StructuralError):
            import_results(b"St_Id,examid\n", "empty.csv")
        self.assertEqual(ExamResult.objects.count(), 0)
        self.assertEqual(ImportRunLog.objects.get().status, "failed")

    def test_unknown_mode(self):
        with self.assertRaises(ValueError):
            import_results(to_csv([result_row("20230001")], RESULT_HEADER), mode="replace")

    def test_storage_failure_raises_with_partial_report(self):
        real_upsert = results_module.upsert_result

        def flaky(candidate, upload_batch):
            if candidate.enrollment_no == "20230003":
                raise OperationalError("could not connect to server")
            return real_upsert(candidate, upload_batch)

        content = to_csv([result_row(f"2023{n:04d}") for n in range(1, 6)], RESULT_HEADER)
        with mock.patch.object(results_module, "upsert_result", side_effect=flaky):
            with self.assertRaises(PersistenceError) as ctx:
                import_results(content, batch_size=2)
        partial = ctx.exception.report
        self.assertEqual(partial.processed_count, 3)
        self.assertEqual([e.row for e in partial.errors], [3])
        self.assertEqual(ExamResult.objects.count(), 3)
        self.assertFalse(ExamResult.objects.filter(enrollment_no="20230005").exists())
        self.assertEqual(ImportRunLog.objects.get().status, "failed")


class InsertModeTests(TestCase):
    def test_existing_keys_are_counted_as_duplicates(self):
        import_results(to_csv([result_row("20230001"), result_row("20230002")], RESULT_HEADER), mode="insert")
        rows = [result_row("20230001"), result_row("20230002"), result_row("20230003")]
        report = import_results(to_csv(rows, RESULT_HEADER), mode="insert")
        self.assertEqual(report.duplicate_count, 2)
        self.assertEqual(report.created_count, 1)
        self.assertEqual(report.errors, [])
        self.assertEqual(ExamResult.objects.count(), 3)

    def test_clean_sub_batch_is_bulk_inserted(self):
        rows = [result_row(f"2023{n:04d}") for n in range(1, 8)]
        with mock.patch.object(results_module, "insert_result", wraps=results_module.insert_result) as per_row:
            report = import_results(to_csv(rows, RESULT_HEADER), mode="insert", batch_size=4)
        self.assertEqual(report.created_count, 7)
        per_row.assert_not_called()

    def test_row_the_database_rejects_falls_back_to_per_row_writes(self):
        rows = [
            result_row("20230001"),
            result_row("20230002", sem=str(10**20)),
            result_row("20230003"),
        ]
        report = import_results(to_csv(rows, RESULT_HEADER), "insert.csv", mode="insert")
        self.assertEqual(report.created_count, 2)
        self.assertEqual([(e.row, e.key) for e in report.errors], [(2, "20230002/101")])
        self.assertEqual(sorted(ExamResult.objects.values_list("enrollment_no", flat=True)),
                         ["20230001", "20230003"])
        self.assertEqual(ImportRunLog.objects.get().status, "partial")

    def test_out_of_range_exam_id_is_a_row_error(self):
        rows = [result_row("20230001"), result_row("20230002", examid=str(10**20)), result_row("20230003")]
        report = import_results(to_csv(rows, RESULT_HEADER), mode="insert")
        self.assertEqual(report.created_count, 2)
        self.assertEqual([e.row for e in report.errors], [2])


class ResultExportTests(TestCase):
    def test_export_round_trip(self):
        row = result_row("20230001", SUB1="", SUB3="3150714", SUB3NA="Data Mining", SUB3CR="4",
                         SUB3GR="FF", BCK3="1", SPI="6.75")
        import_results(to_csv([row, result_row("20230002", exam_id=202)], RESULT_HEADER))
        exported = export_results()
        self.assertTrue(exported.startswith("St_Id,ENROLLMENT_NO,extype,examid,"))
        rows = decode_tabular(exported)
        self.assertEqual(len(rows), 2)
        for number, raw in enumerate(rows, start=1):
            candidate = normalize_result_row(raw, number).value
            stored = ExamResult.objects.get(enrollment_no=candidate.enrollment_no, exam_id=candidate.exam_id)
            self.assertEqual(candidate.subjects, stored.subjects)
            for field in ("spi", "cpi", "cgpa", "total_credits", "earned_credits", "result", "trials"):
                self.assertEqual(candidate.fields[field], getattr(stored, field))
        self.assertEqual(rows[0]["SUB2"], "3150714")
        self.assertEqual(rows[0]["BCK2"], "1")

    def test_export_is_reproducible_and_filtered(self):
        import_results(to_csv([result_row("20230001"), result_row("20230002", sem="6")], RESULT_HEADER))
        self.assertEqual(export_results(), export_results())
        only_sem6 = decode_tabular(export_results(semester=6))
        self.assertEqual([r["ENROLLMENT_NO"] for r in only_sem6], ["20230002"])
        by_branch = decode_tabular(export_results(branch_name="computer engineering"))
        self.assertEqual(len(by_branch), 2)

    def test_xlsx_export(self):
        import_results(to_csv([result_row("20230001")], RESULT_HEADER))
        content = export_results("xlsx")
        rows = decode_tabular(content, "results.xlsx")
        self.assertEqual(rows[0]["ENROLLMENT_NO"], "20230001")
        self.assertEqual(rows[0]["SUB1"], "3150703")


class UploadBatchTests(TestCase):
    def test_batches_are_isolated(self):
        first = import_results(to_csv([result_row("20230001"), result_row("20230002")], RESULT_HEADER))
        second = import_results(to_csv([result_row("20230003")], RESULT_HEADER))
        deletion = delete_upload_batch(first.batch_id)
        self.assertEqual(deletion.deleted_count, 2)
        self.assertTrue(deletion.found)
        self.assertEqual(list(ExamResult.objects.values_list("enrollment_no", flat=True)), ["20230003"])
        self.assertEqual([b.batch_id for b in list_upload_batches()], [second.batch_id])

    def test_unknown_batch_deletes_nothing(self):
        import_results(to_csv([result_row("20230001")], RESULT_HEADER))
        deletion = delete_upload_batch("00000000-0000-0000-0000-000000000000")
        self.assertEqual(deletion.deleted_count, 0)
        self.assertFalse(deletion.found)
        self.assertEqual(ExamResult.objects.count(), 1)

    def test_listing_is_newest_first_and_limited(self):
        batches = []
        for n in range(1, 4):
            batches.append(import_results(to_csv([result_row(f"2023000{n}")], RESULT_HEADER)).batch_id)
        now = timezone.now()
        for age, batch_id in enumerate(batches):
            ExamResult.objects.filter(upload_batch=batch_id).update(updated_at=now - timedelta(days=age))
        listed = list_upload_batches()
        self.assertEqual([b.batch_id for b in listed], batches)
        self.assertEqual(listed[0].count, 1)
        self.assertEqual(len(list_upload_batches(limit=2)), 2)
