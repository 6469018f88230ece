"""
HTTP-слой: коды ответов и формы данных
"""

import pytest
from fastapi.testclient import TestClient

from fitnorms.database import get_db
from fitnorms.main import app
from fitnorms.models import Period, SexScope
from fitnorms.utils.results import upsert_result


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    # Без контекстного менеджера: lifespan (create_all + импорт каталога) не запускается
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


class TestResolve:

    def test_by_template(self, client, sprint_template):
        resp = client.post("/grades/resolve", json={
            "value": 6.25, "sex": "Ж", "class_number": 4, "template_id": sprint_template.id,
        })
        assert resp.status_code == 200
        assert resp.json() == {"resolved": True, "grade": 5, "code": "5", "reason": None}

    def test_unresolved_gap(self, client, sprint_template):
        body = client.post("/grades/resolve", json={
            "value": 6.25, "sex": "M", "class_number": 4, "template_id": sprint_template.id,
        }).json()
        assert body["resolved"] is False
        assert body["code"] == "-"
        assert body["reason"] == "out_of_range"

    def test_unknown_sex(self, client, sprint_template):
        body = client.post("/grades/resolve", json={
            "value": 6.0, "class_number": 4, "template_id": sprint_template.id,
        }).json()
        assert body["reason"] == "sex_unknown"

    def test_requires_table(self, client):
        assert client.post("/grades/resolve", json={"value": 1}).status_code == 400

    def test_unknown_instance(self, client):
        assert client.post("/grades/resolve", json={"value": 1, "instance_id": "x"}).status_code == 404


class TestInstances:

    def test_create_and_conflict(self, client, group, sprint_template):
        payload = {
            "template_id": sprint_template.id,
            "test_date": "2024-09-10",
            "period": "START_OF_YEAR",
        }
        resp = client.post(f"/groups/{group.id}/instances", json=payload)
        assert resp.status_code == 201
        body = resp.json()
        assert body["period"] == "START_OF_YEAR"
        assert body["academic_year"] == "2024/2025"

        again = client.post(f"/groups/{group.id}/instances", json={**payload, "test_date": "2024-09-12"})
        assert again.status_code == 409

    def test_regular_can_repeat(self, client, group, sprint_template):
        payload = {"template_id": sprint_template.id, "test_date": "2024-10-01"}
        assert client.post(f"/groups/{group.id}/instances", json=payload).status_code == 201
        assert client.post(f"/groups/{group.id}/instances", json=payload).status_code == 201

    def test_class_outside_template(self, client, db, group, jump_template):
        group.class_number = 9
        db.commit()
        resp = client.post(f"/groups/{group.id}/instances", json={
            "template_id": jump_template.id, "test_date": "2024-10-01",
        })
        assert resp.status_code == 400

    def test_unknown_group(self, client, sprint_template):
        resp = client.post("/groups/missing/instances", json={
            "template_id": sprint_template.id, "test_date": "2024-10-01",
        })
        assert resp.status_code == 404

    def test_invalid_period_rejected(self, client, group, sprint_template):
        resp = client.post(f"/groups/{group.id}/instances", json={
            "template_id": sprint_template.id, "test_date": "2024-10-01", "period": "MIDYEAR",
        })
        assert resp.status_code == 422

    def test_eligible(self, client, students, sprint_template, make_instance):
        inst = make_instance(sprint_template, sex_scope=SexScope.FEMALE)
        body = client.get(f"/instances/{inst.id}/eligible").json()
        assert body["sex_scope"] == "FEMALE"
        assert [s["full_name"] for s in body["students"]] == ["Петрова Мария"]

    def test_eligible_unknown(self, client):
        assert client.get("/instances/missing/eligible").status_code == 404


class TestResults:

    def test_submit_and_resubmit(self, client, students, sprint_template, make_instance):
        inst = make_instance(sprint_template)
        ivan, maria = students["ivan"].id, students["maria"].id

        resp = client.post(f"/instances/{inst.id}/results", json={"results": [
            {"student_id": ivan, "value": 6.5},
            {"student_id": maria, "value": 6.0, "grade": "О"},
        ]})
        assert resp.status_code == 200
        by_student = {r["student_id"]: r for r in resp.json()}
        assert by_student[ivan]["grade"] == "4"
        assert by_student[maria]["grade"] == "О"
        assert by_student[maria]["grade_is_manual"] is True

        again = client.post(f"/instances/{inst.id}/results", json={"results": [
            {"student_id": ivan, "value": 6.0},
        ]}).json()
        assert again[0]["id"] == by_student[ivan]["id"]
        assert again[0]["grade"] == "5"

    def test_invalid_grade_code(self, client, students, sprint_template, make_instance):
        inst = make_instance(sprint_template)
        resp = client.post(f"/instances/{inst.id}/results", json={"results": [
            {"student_id": students["ivan"].id, "value": 6.0, "grade": "7"},
        ]})
        assert resp.status_code == 400

    def test_unknown_instance(self, client, students):
        resp = client.post("/instances/missing/results", json={"results": [
            {"student_id": students["ivan"].id, "value": 6.0},
        ]})
        assert resp.status_code == 404

    def test_individual(self, client, students):
        resp = client.post(f"/students/{students['maria'].id}/results/individual", json={
            "title": "Плавание 25 м", "grade": "5", "value": 31.5, "unit": "с",
        })
        assert resp.status_code == 201
        body = resp.json()
        assert body["instance_id"] is None
        assert body["title"] == "Плавание 25 м"
        assert body["grade"] == "5"


class TestReports:

    @pytest.fixture
    def season(self, db, students, sprint_template, make_instance):
        from datetime import date
        start = make_instance(sprint_template, Period.START_OF_YEAR, date(2024, 9, 10))
        end = make_instance(sprint_template, Period.END_OF_YEAR, date(2025, 5, 20))
        upsert_result(db, students["ivan"].id, start.id, 6.2)
        upsert_result(db, students["ivan"].id, end.id, 5.9)
        return start, end

    def test_group_progress(self, client, group, students, season):
        resp = client.get(f"/groups/{group.id}/reports/progress")
        assert resp.status_code == 200
        body = resp.json()
        assert body["academic_year"] == "2024/2025"
        norm = body["norms"][0]
        assert norm["instance_id"] == season[0].id
        ivan = next(r for r in norm["results"] if r["student_id"] == students["ivan"].id)
        assert ivan["delta"] == pytest.approx(-0.3)
        assert ivan["outcome"] == "improved"
        assert norm["summary"]["improved_count"] == 1

    def test_group_progress_other_year(self, client, group, season):
        body = client.get(f"/groups/{group.id}/reports/progress", params={"year": "2023/2024"}).json()
        assert body["norms"] == []

    def test_student_progress(self, client, students, season):
        body = client.get(f"/students/{students['ivan'].id}/reports/progress").json()
        assert body["student_name"] == "Иванов Иван"
        assert body["norms"][0]["results"][0]["end_value"] == 5.9

    def test_control_best(self, client, group, students, season):
        body = client.get(f"/groups/{group.id}/control-best").json()
        assert body["best_by_norm"][0]["value"] == 5.9
        assert body["top_progress"][0]["progress"] == pytest.approx(0.3)

    def test_class_control_best(self, client, group, students, season):
        resp = client.get("/grades/4/control-best")
        assert resp.status_code == 200
        body = resp.json()
        assert body["class_number"] == 4
        assert body["group_stats"][0]["group_id"] == group.id
        assert body["group_stats"][0]["best_value"] == 5.9
        assert body["top_progress"][0]["group_name"] == "4 А"

    def test_class_control_best_invalid_class(self, client):
        assert client.get("/grades/12/control-best").status_code == 400
        assert client.get("/grades/x/control-best").status_code == 422

    def test_not_found(self, client):
        assert client.get("/groups/missing/reports/progress").status_code == 404
        assert client.get("/students/missing/reports/progress").status_code == 404
        assert client.get("/groups/missing/control-best").status_code == 404
