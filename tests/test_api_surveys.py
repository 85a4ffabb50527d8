"""Integration tests for the survey HTTP API."""
import csv
import io
import uuid

import pytest
from httpx import ASGITransport, AsyncClient


@pytest.fixture
async def client(test_app):
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as ac:
        yield ac


SURVEY_PAYLOAD = {
    "title": "Would you buy it?",
    "survey_type": "nps_survey",
    "questions": [
        {
            "question": "Which plan fits you?",
            "question_type": "multiple_choice",
            "options": ["Starter", "Pro"],
            "required": True,
        },
        {
            "question": "How likely are you to recommend us?",
            "question_type": "rating_scale",
            "min_scale": 0,
            "max_scale": 10,
        },
        {"question": "Anything else?", "question_type": "open_text"},
    ],
}


async def _create_survey(client) -> dict:
    response = await client.post("/surveys", json=SURVEY_PAYLOAD)
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_create_survey(client):
    survey = await _create_survey(client)

    assert survey["status"] == "draft"
    assert survey["survey_type"] == "nps_survey"
    assert survey["response_count"] == 0
    assert survey["created_at"].endswith("Z")
    assert [q["order_index"] for q in survey["questions"]] == [0, 1, 2]
    assert survey["questions"][0]["required"] is True


@pytest.mark.asyncio
async def test_create_survey_validation_error(client):
    response = await client.post(
        "/surveys",
        json={"title": "Bad", "questions": [{"question": "Q", "question_type": "slider"}]},
    )

    assert response.status_code == 422
    assert response.json()["detail"] == "Request validation failed"


@pytest.mark.asyncio
async def test_publish_and_close(client):
    survey = await _create_survey(client)
    survey_id = survey["survey_id"]

    published = await client.post(f"/surveys/{survey_id}/publish")
    assert published.status_code == 200
    assert published.json()["status"] == "published"

    again = await client.post(f"/surveys/{survey_id}/publish")
    assert again.status_code == 409
    assert again.json()["detail"] == "invalid_state_transition"

    closed = await client.post(f"/surveys/{survey_id}/close")
    assert closed.status_code == 200
    assert closed.json()["status"] == "closed"
    assert closed.json()["closed_at"].endswith("Z")


@pytest.mark.asyncio
async def test_unknown_ids_return_404(client):
    missing = uuid.uuid4()

    for method, path in [
        ("post", f"/surveys/{missing}/publish"),
        ("post", f"/surveys/{missing}/close"),
        ("get", f"/surveys/{missing}/results"),
        ("get", f"/surveys/{missing}/insights"),
        ("get", f"/surveys/{missing}/results/export?format=csv"),
        ("post", f"/surveys/responses/{missing}/complete"),
    ]:
        response = await getattr(client, method)(path)
        assert response.status_code == 404, path

    assert (await client.get(f"/surveys/{missing}/results")).json()["detail"] == "survey_not_found"
    assert (await client.post(f"/surveys/responses/{missing}/complete")).json()["detail"] == "response_not_found"


@pytest.mark.asyncio
async def test_step_by_step_response_flow(client):
    survey = await _create_survey(client)
    survey_id = survey["survey_id"]
    choice_id = survey["questions"][0]["question_id"]

    started = await client.post(
        f"/surveys/{survey_id}/responses/start", json={"lobby_intensity": "neat_idea"}
    )
    assert started.status_code == 201
    response_id = started.json()["response_id"]
    assert started.json()["completed_at"] is None

    answered = await client.post(
        f"/surveys/responses/{response_id}/answers", json={"question_id": choice_id, "value": "Pro"}
    )
    assert answered.status_code == 204

    foreign = await client.post(
        f"/surveys/responses/{response_id}/answers",
        json={"question_id": str(uuid.uuid4()), "value": "Pro"},
    )
    assert foreign.status_code == 404
    assert foreign.json()["detail"] == "question_not_found"

    completed = await client.post(f"/surveys/responses/{response_id}/complete")
    assert completed.status_code == 200
    assert completed.json()["completion_rate"] == 100.0

    results = (await client.get(f"/surveys/{survey_id}/results")).json()
    assert results["total_responses"] == 1
    assert results["question_results"][0]["summary"]["options"][0]["option"] == "Pro"


@pytest.mark.asyncio
async def test_submission_results_insights_and_exports(client):
    survey = await _create_survey(client)
    survey_id = survey["survey_id"]
    choice_id, rating_id, text_id = (q["question_id"] for q in survey["questions"])

    submissions = [
        ("Pro", 10, "Ship it", "take_my_money"),
        ("Pro", 9, "ship it", "take_my_money"),
        ("Starter", 3, "Too pricey", "neat_idea"),
    ]
    for plan, score, comment, intensity in submissions:
        response = await client.post(
            f"/surveys/{survey_id}/responses",
            json={
                "answers": {choice_id: plan, rating_id: score, text_id: comment},
                "lobby_intensity": intensity,
            },
        )
        assert response.status_code == 201
        assert response.json()["completed_at"] is not None

    results = (await client.get(f"/surveys/{survey_id}/results")).json()
    assert results["total_responses"] == 3
    assert results["completion_rate"] == 100.0
    choice_summary = results["question_results"][0]["summary"]
    assert choice_summary["type"] == "multiple_choice"
    assert choice_summary["options"][0] == {"option": "Pro", "count": 2, "percentage": pytest.approx(66.666, abs=0.01)}

    filtered = (
        await client.get(f"/surveys/{survey_id}/results", params={"lobby_intensity": "take_my_money"})
    ).json()
    assert filtered["total_responses"] == 2

    insights = (await client.get(f"/surveys/{survey_id}/insights")).json()
    assert insights["nps_score"] == pytest.approx(33.333, abs=0.01)
    assert "Dominant preference: Pro (66.7% choose this)" in insights["key_findings"]
    assert 'Most common feedback: "ship it"' in insights["key_findings"]
    assert insights["summary"].startswith('Survey "Would you buy it?" received 3 responses (100.0% completion).')

    csv_export = await client.get(f"/surveys/{survey_id}/results/export", params={"format": "csv"})
    assert csv_export.status_code == 200
    assert csv_export.headers["content-type"].startswith("text/csv")
    assert csv_export.headers["content-disposition"] == 'attachment; filename="survey-results.csv"'
    rows = list(csv.reader(io.StringIO(csv_export.text)))
    assert rows[0] == ["Question", "Type", "Response Count", "Details"]
    assert rows[1][:3] == ["Which plan fits you?", "multiple_choice", "3"]

    json_export = await client.get(f"/surveys/{survey_id}/results/export")
    assert json_export.status_code == 200
    assert json_export.headers["content-type"].startswith("application/json")
    assert json_export.headers["content-disposition"] == 'attachment; filename="survey-results.json"'
    assert json_export.json()["survey"]["id"] == survey_id
    assert len(json_export.json()["results"]) == 3

    bad_format = await client.get(f"/surveys/{survey_id}/results/export", params={"format": "xml"})
    assert bad_format.status_code == 422


@pytest.mark.asyncio
async def test_submission_missing_required_answer(client):
    survey = await _create_survey(client)
    survey_id = survey["survey_id"]
    choice_id = survey["questions"][0]["question_id"]
    rating_id = survey["questions"][1]["question_id"]

    response = await client.post(
        f"/surveys/{survey_id}/responses", json={"answers": {rating_id: 7}}
    )

    assert response.status_code == 400
    assert response.json()["detail"] == {
        "error": "missing_required_answers",
        "question_ids": [choice_id],
    }

    results = (await client.get(f"/surveys/{survey_id}/results")).json()
    assert results["total_responses"] == 0
    assert results["question_results"][1]["response_count"] == 0
