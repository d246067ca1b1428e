import os
import uuid


def _screenshot(directory: str, correction_uuid: str) -> str:
    path = os.path.join(directory, f"{correction_uuid}.png")
    with open(path, "wb") as f:
        f.write(b"\x89PNG")
    return path


def test_get_report_with_corrections(client, seed_run):
    correction_uuid = str(uuid.uuid4())
    seed_run("report-1", corrections=[("important", correction_uuid)])

    response = client.get("/api/v1/reports/report-1")

    assert response.status_code == 200
    report = response.json()["data"]
    assert report["uuid"] == "report-1"
    assert report["state"] == "completed"
    assert [c["uuid"] for c in report["corrections"]] == [correction_uuid]
    assert report["corrections"][0]["corrected_text"] == "the"


def test_get_report_returns_latest_run_for_correlation_id(client, seed_run):
    seed_run("report-dup", url="https://old.example.com")
    seed_run("report-dup", url="https://new.example.com")

    response = client.get("/api/v1/reports/report-dup")

    assert response.json()["data"]["url"] == "https://new.example.com"


def test_get_unknown_report(client):
    response = client.get("/api/v1/reports/does-not-exist")
    assert response.status_code == 404
    assert response.json()["message"] == "Report not found"


def test_delete_report_removes_rows_and_screenshots(client, seed_run, screenshot_dir):
    correction_uuid = str(uuid.uuid4())
    seed_run("report-del", corrections=[("minor", correction_uuid)])
    path = _screenshot(screenshot_dir, correction_uuid)

    response = client.delete("/api/v1/reports/report-del")

    assert response.status_code == 204
    assert not os.path.exists(path)
    assert client.get("/api/v1/reports/report-del").status_code == 404


def test_delete_unknown_report(client):
    assert client.delete("/api/v1/reports/never-existed").status_code == 404


def test_debugging_info_requires_superuser(client, seed_run):
    seed_run("report-debug-1")

    assert client.get("/api/v1/reports/report-debug-1/debugging-info").status_code == 401
    response = client.get(
        "/api/v1/reports/report-debug-1/debugging-info",
        headers={"X-Superuser-Token": "wrong"},
    )
    assert response.status_code == 401


def test_debugging_info_for_superuser(client, seed_run, superuser_headers):
    seed_run("report-debug-2")

    response = client.get("/api/v1/reports/report-debug-2/debugging-info", headers=superuser_headers)

    assert response.status_code == 200
    info = response.json()["data"]
    assert info["report_uuid"] == "report-debug-2"
    assert info["generate_corrections_model"] == "gpt-4o"
    assert info["input_tokens"] == 120


def test_services_are_built_at_startup(client, test_app):
    services = test_app.state.scan_services
    assert services.workflow.generator_model == "gpt-4o"
    assert str(services.screenshots.directory) == os.environ["SCREENSHOT_DIR"]


def test_report_is_not_cached(client, seed_run):
    seed_run("report-running", state="running", state_internal="checking_spelling", run_end_time=None)

    response = client.get("/api/v1/reports/report-running")

    assert response.headers["cache-control"] == "no-store"
    assert response.json()["data"]["run_end_time"] is None
