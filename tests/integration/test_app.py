"""End-to-end tests through the application lifespan and a real SQLite file."""

from pathlib import Path

import pytest

@pytest.mark.integration
def test_recurring_chore_workflow(test_client, test_settings):
    member = test_client.post("/api/team-members", json={"name": "Alice"}).json()["team_member"]
    chore = test_client.post(
        "/api/chores",
        json={
            "title": "Vacuum",
            "due_date": "2026-01-05",
            "assignee_id": member["id"],
            "recurrence": {"type": "weekly", "by_week_day": ["MO"]},
        },
    ).json()["chore"]

    calendar = test_client.get("/api/chores/calendar/2026/1", params={"assignee_id": member["id"]}).json()
    assert [c["due_date"] for c in calendar["chores"]] == ["2026-01-05", "2026-01-12", "2026-01-19", "2026-01-26"]

    virtual_id = f"{chore['id']}::instance::2026-01-12"
    response = test_client.patch(f"/api/chores/{virtual_id}/status", json={"status": "completed"})
    assert response.status_code == 200

    calendar = test_client.get("/api/chores/calendar/2026/1", params={"status": "completed"}).json()
    assert [c["id"] for c in calendar["chores"]] == [response.json()["chore"]["id"]]

    assert test_client.delete(f"/api/team-members/{member['id']}").status_code == 409

    assert Path(test_settings.sqlite_db_path).exists()
