# tests/test_result_service.py
import pytest

from app.core.cache import CacheManager
from app.core.errors import NotFoundError, ValidationError
from app.models import Result, Student
from app.services.result_service import ResultService, CLASS_STATS, STUDENT_SHEET, period_key
from app.services.student_service import StudentService

SESSION = "2024/2025"
TERM = "1st Term"


@pytest.fixture
def service(db):
    return ResultService(db, cache=CacheManager())


def record(service, student, subject, ca, test, exam, **extra):
    return service.record_result({
        "student_id": student.id,
        "subject_id": subject.id,
        "session": SESSION,
        "term": TERM,
        "ca": ca,
        "test": test,
        "exam": exam,
        **extra,
    })


def test_record_result_derives_grade_and_position(service, students, subjects):
    result = record(service, students[0], subjects[0], 8, 15, 60)

    assert result.total == 83
    assert result.percentage == 83
    assert result.grade == "A"
    assert result.class_name == "JSS1"
    assert result.position == 1
    assert result.percentile == 100


def test_record_result_clamps_scores(service, students, subjects):
    result = record(service, students[0], subjects[0], 50, -3, 90)
    assert (result.ca, result.test, result.exam, result.total) == (10, 0, 70, 80)


def test_record_result_overwrites_existing_row(service, db, students, subjects):
    first = record(service, students[0], subjects[0], 5, 5, 5)
    second = record(service, students[0], subjects[0], 10, 20, 70)

    assert first.id == second.id
    assert db.query(Result).count() == 1
    assert second.total == 100


def test_record_result_unknown_student(service, subjects):
    import uuid
    with pytest.raises(NotFoundError):
        service.record_result({"student_id": uuid.uuid4(), "subject_id": subjects[0].id})


def test_record_result_requires_class(service, db, subjects):
    student = Student(name="No Class")
    db.add(student)
    db.commit()
    with pytest.raises(ValidationError):
        service.record_result({"student_id": student.id, "subject_id": subjects[0].id})


def test_positions_use_competition_ranking(service, students, subjects):
    for subject in subjects:
        service.add_class_subject("JSS1", subject.id)

    record(service, students[0], subjects[0], 10, 20, 60)   # 90
    record(service, students[0], subjects[1], 10, 20, 50)   # 80 -> 170
    record(service, students[1], subjects[0], 10, 20, 50)   # 80
    record(service, students[1], subjects[1], 10, 20, 60)   # 90 -> 170
    record(service, students[2], subjects[0], 10, 20, 40)   # 70, missing ENG -> 70

    rows = {r.student_id: r for r in service.find_many()}
    assert rows[students[0].id].position == 1
    assert rows[students[1].id].position == 1
    assert rows[students[2].id].position == 3
    assert rows[students[2].id].class_average == 35.0
    assert rows[students[2].id].percentile == 33

    stats = service.get_class_stats("JSS1", SESSION, TERM)
    assert stats["highest"] == 170
    assert stats["lowest"] == 70
    assert stats["average"] == 136.7
    assert stats["student_count"] == 3
    assert stats["subject_count"] == 2


def test_class_stats_are_cached_and_invalidated(service, students, subjects):
    record(service, students[0], subjects[0], 10, 20, 60)
    key = period_key(CLASS_STATS, "JSS1", SESSION, TERM)
    assert service.cache.get(key)["student_count"] == 1

    service.invalidate("JSS1", SESSION, TERM)
    assert service.cache.get(key) is None

    record(service, students[1], subjects[0], 10, 20, 30)
    assert service.get_class_stats("JSS1", SESSION, TERM)["student_count"] == 2


def test_delete_result_reranks(service, students, subjects):
    top = record(service, students[0], subjects[0], 10, 20, 70)
    second = record(service, students[1], subjects[0], 5, 10, 30)
    assert second.position == 2

    service.delete_result(top.id)
    assert service.get_or_404(second.id).position == 1


def test_update_result_moves_period(service, students, subjects):
    result = record(service, students[0], subjects[0], 10, 20, 70)
    updated = service.update_result(result.id, {"term": "2nd Term", "exam": 10})

    assert updated.term == "2nd Term"
    assert updated.total == 40
    assert updated.grade == "C"
    assert service.get_class_stats("JSS1", SESSION, TERM)["student_count"] == 0


def test_bulk_update_reports_failures(service, students, subjects):
    import uuid
    outcome = service.bulk_update("JSS1", subjects[0].id, SESSION, TERM, [
        {"student_id": students[0].id, "ca": 10, "test": 20, "exam": 70},
        {"student_id": students[1].id, "ca": 5, "test": 10, "exam": 35},
        {"student_id": uuid.uuid4(), "ca": 1},
    ])

    assert outcome["success_count"] == 2
    assert outcome["total_count"] == 3
    assert outcome["errors"][0]["error"] == "Student not found"
    assert outcome["message"] == "Updated 2 out of 3 results"


def test_import_results_validates_rows(service, students, subjects):
    outcome = service.import_results([
        {"student_id": str(students[0].id), "subject_id": str(subjects[0].id), "ca": 9, "test": 18, "exam": 60,
         "session": SESSION, "term": TERM},
        {"student_id": "not-a-uuid", "subject_id": str(subjects[0].id)},
        {"student_id": str(students[1].id), "subject_id": str(subjects[0].id), "term": "Summer"},
    ])

    assert outcome["imported"] == 1
    assert outcome["total"] == 3
    assert [row["success"] for row in outcome["results"]] == [True, False, False]
    assert outcome["message"] == "Successfully imported 1 of 3 results"


def test_scoring_config_update_regrades(service, students, subjects):
    result = record(service, students[0], subjects[0], 10, 20, 30)   # 60/100 -> B
    assert result.grade == "B"

    config = service.update_scoring_config({"exam": 30, "total": 60})
    assert config.total == 60

    regraded = service.get_or_404(result.id)
    assert regraded.percentage == 100
    assert regraded.grade == "A+"


def test_scoring_config_requires_session_and_term_together(service):
    with pytest.raises(ValidationError):
        service.update_scoring_config({"exam": 60}, session=SESSION)


def test_period_scoring_config_overrides_global(service):
    service.update_scoring_config({"ca": 20, "test": 20, "exam": 60}, session=SESSION, term=TERM)

    assert service.get_scoring_config(SESSION, TERM).ca == 20
    assert service.get_scoring_config("2023/2024", TERM).ca == 10


def test_grading_scale_update_regrades(service, students, subjects):
    result = record(service, students[0], subjects[0], 10, 20, 25)   # 55 -> C+
    scale = service.update_grading_scale({"PASS": 50})

    assert [band.grade for band in scale] == ["PASS", "F"]
    assert service.get_or_404(result.id).grade == "PASS"


def test_remove_class_subject_deletes_results(service, students, subjects):
    service.add_class_subject("JSS1", subjects[0].id)
    service.add_class_subject("JSS1", subjects[1].id)
    record(service, students[0], subjects[0], 10, 20, 70)
    record(service, students[0], subjects[1], 10, 20, 70)

    assert service.remove_class_subject("JSS1", subjects[1].id) == 1
    assert [s.code for s in service.list_class_subjects("JSS1")] == ["MTH"]
    assert service.count() == 1

    with pytest.raises(NotFoundError):
        service.remove_class_subject("JSS1", subjects[1].id)


def test_add_class_subject_is_idempotent(service, subjects):
    first = service.add_class_subject("JSS1", subjects[0].id)
    second = service.add_class_subject("JSS1", subjects[0].id)
    assert first.id == second.id


def test_class_subjects_fall_back_to_recorded(service, students, subjects):
    record(service, students[0], subjects[1], 10, 20, 70)
    assert [s.code for s in service.class_subjects("JSS1", SESSION, TERM)] == ["ENG"]


def test_result_sheet_fills_missing_subjects(service, students, subjects):
    for subject in subjects:
        service.add_class_subject("JSS1", subject.id)
    record(service, students[0], subjects[0], 10, 20, 70)
    record(service, students[1], subjects[0], 5, 10, 20)

    sheet = service.get_student_result_sheet(students[0].id, SESSION, TERM)

    assert sheet["student"]["name"] == "Ada Obi"
    missing = [row for row in sheet["subject_results"] if row["subject_title"] == "English"][0]
    assert missing["grade"] == "F"
    assert missing["remark"] == "No result available"
    assert sheet["summary"]["total_subjects"] == 2
    assert sheet["summary"]["total_score"] == 100
    assert sheet["summary"]["average_score"] == 50
    assert sheet["summary"]["overall_grade"] == "C+"
    assert sheet["summary"]["position"] == 1
    assert sheet["summary"]["out_of"] == 2


def test_class_results_rows(service, students, subjects):
    service.add_class_subject("JSS1", subjects[0].id)
    service.add_class_subject("JSS1", subjects[1].id)
    record(service, students[1], subjects[0], 10, 20, 70)
    record(service, students[1], subjects[1], 10, 20, 60)
    record(service, students[0], subjects[0], 5, 10, 40)

    rows = service.get_class_results("JSS1", SESSION, TERM)

    assert [row["student_name"] for row in rows] == ["Bayo Ade", "Ada Obi", "Chika Eze"]
    assert rows[0]["status"] == "Completed"
    assert rows[0]["total_score"] == 190
    assert rows[0]["average_score"] == 95
    assert rows[1]["status"] == "In Progress"
    assert rows[2]["status"] == "Pending"
    assert rows[2]["position"] is None


def test_class_summary_distribution(service, students, subjects):
    service.add_class_subject("JSS1", subjects[0].id)
    record(service, students[0], subjects[0], 10, 20, 70)
    record(service, students[1], subjects[0], 0, 0, 0)

    summary = service.get_class_summary("JSS1", SESSION, TERM)
    subject = summary["subjects"][0]

    assert subject["code"] == "MTH"
    assert subject["average"] == 100
    assert subject["lowest"] == 0
    assert subject["grade_distribution"]["A+"] == 1
    assert subject["grade_distribution"]["F"] == 1
    assert summary["overall"]["total_results"] == 2


def test_export_csv(service, students, subjects):
    service.add_class_subject("JSS1", subjects[0].id)
    record(service, students[0], subjects[0], 10, 20, 70)

    filename, content = service.export_class_results_csv("JSS1", SESSION, TERM)
    lines = content.strip().splitlines()

    assert filename.endswith(".csv")
    assert lines[0] == (
        "S/N,Student Name,Registration Number,MTH_CA,MTH_Test,MTH_Exam,MTH_Total,MTH_Grade,"
        "Grand Total,Average,Position"
    )
    assert lines[1].startswith("1,Ada Obi,REG001,")
    assert len(lines) == 2


def test_summary_statistics(service, students, subjects):
    record(service, students[0], subjects[0], 10, 20, 70)
    stats = service.get_summary_statistics(SESSION, TERM)

    assert stats["total_students"] == 3
    assert stats["students_with_results"] == 1
    assert stats["outstanding"] == 2


def test_result_write_refreshes_cached_sheet(service, students, subjects):
    record(service, students[0], subjects[0], 5, 5, 5)
    assert service.get_student_result_sheet(students[0].id, SESSION, TERM)["summary"]["total_score"] == 15
    assert service.cache.exists(period_key(STUDENT_SHEET, students[0].id, SESSION, TERM))

    record(service, students[0], subjects[0], 10, 20, 70)
    assert service.get_student_result_sheet(students[0].id, SESSION, TERM)["summary"]["total_score"] == 100


def test_student_update_refreshes_cached_sheet(db, service, students, subjects):
    record(service, students[0], subjects[0], 10, 20, 70)
    service.get_student_result_sheet(students[0].id, SESSION, TERM)

    StudentService(db, cache=service.cache).update_student(students[0].id, {"name": "Ada Obi-Eze"})

    sheet = service.get_student_result_sheet(students[0].id, SESSION, TERM)
    assert sheet["student"]["name"] == "Ada Obi-Eze"


def test_outstanding_counts_active_students_without_results(db, service, students, subjects):
    students[2].status = "graduated"
    db.commit()
    record(service, students[0], subjects[0], 10, 20, 70)
    record(service, students[0], subjects[1], 10, 20, 70)

    stats = service.get_summary_statistics(SESSION, TERM)

    assert stats["total_students"] == 2
    assert stats["results_submitted"] == 2
    assert stats["students_with_results"] == 1
    assert stats["outstanding"] == 1
