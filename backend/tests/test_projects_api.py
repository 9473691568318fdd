"""
Tests for the /projects HTTP surface: status codes, camelCase payloads,
authentication and ownership.
"""
import uuid

import httpx
import pytest
from httpx import AsyncClient

from app.services.directory import ContractorDirectory

from conftest import profile

POSTING = {
    "title": "Site Engineer",
    "location": "Pune",
    "projectType": "Commercial",
    "employmentType": "Contract",
    "timeline": {"startDate": "2026-03-01", "endDate": "2026-06-30"},
    "hourlyRate": {"min": 25, "max": 40},
}


async def _post_project(client: AsyncClient, headers: dict, **overrides) -> dict:
    response = await client.post("/projects", json={**POSTING, **overrides}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestProjectsCRUD:

    async def test_create_project(self, client: AsyncClient, contractor_headers: dict):
        data = await _post_project(client, contractor_headers)

        assert data["status"] == "active"
        assert data["applicantsCount"] == 0
        assert data["workers"] == []
        assert data["contractor"] == "C1"
        assert data["contractorDetails"] is None
        assert data["projectType"] == "Commercial"
        assert data["hourlyRate"] == {"min": 25.0, "max": 40.0}
        assert data["timeline"] == {"startDate": "2026-03-01", "endDate": "2026-06-30"}
        assert "id" in data

    async def test_create_project_missing_location(
        self, client: AsyncClient, contractor_headers: dict,
    ):
        body = {key: value for key, value in POSTING.items() if key != "location"}
        response = await client.post("/projects", json=body, headers=contractor_headers)

        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"
        assert (await client.get("/projects")).json() == []

    async def test_create_project_rejects_server_fields(
        self, client: AsyncClient, contractor_headers: dict,
    ):
        response = await client.post(
            "/projects", json={**POSTING, "applicantsCount": 12}, headers=contractor_headers,
        )
        assert response.status_code == 400

    async def test_create_project_rejects_overflowing_rate(
        self, client: AsyncClient, contractor_headers: dict,
    ):
        response = await client.post(
            "/projects",
            json={**POSTING, "hourlyRate": {"min": 1e12, "max": 1e13}},
            headers=contractor_headers,
        )

        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"

    async def test_list_and_filter(
        self, client: AsyncClient, contractor_headers: dict, other_contractor_headers: dict,
    ):
        await _post_project(client, contractor_headers, title="Mine")
        await _post_project(client, other_contractor_headers, title="Theirs")

        everything = await client.get("/projects")
        mine = await client.get("/projects", params={"contractor": "C1"})
        theirs = await client.get("/projects", params={"builder": "C2"})

        assert [p["title"] for p in everything.json()] == ["Mine", "Theirs"]
        assert [p["title"] for p in mine.json()] == ["Mine"]
        assert [p["title"] for p in theirs.json()] == ["Theirs"]

    async def test_get_project(self, client: AsyncClient, contractor_headers: dict):
        created = await _post_project(client, contractor_headers)

        first = await client.get(f"/projects/{created['id']}")
        second = await client.get(f"/projects/{created['id']}")

        assert first.status_code == 200
        assert first.json() == second.json()

    @pytest.mark.parametrize("project_id", [str(uuid.uuid4()), "not-a-uuid"])
    async def test_get_missing_project(self, client: AsyncClient, project_id: str):
        response = await client.get(f"/projects/{project_id}")

        assert response.status_code == 404
        assert response.json()["code"] == "not_found"

    async def test_update_project(self, client: AsyncClient, contractor_headers: dict):
        created = await _post_project(client, contractor_headers)

        response = await client.put(
            f"/projects/{created['id']}",
            json={"status": "completed", "progress": 100},
            headers=contractor_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "completed"
        assert data["progress"] == 100
        assert data["title"] == "Site Engineer"

    async def test_update_invalid_transition(self, client: AsyncClient, contractor_headers: dict):
        created = await _post_project(client, contractor_headers)
        url = f"/projects/{created['id']}"
        await client.put(url, json={"status": "cancelled"}, headers=contractor_headers)

        response = await client.put(url, json={"status": "active"}, headers=contractor_headers)

        assert response.status_code == 409
        assert response.json()["code"] == "invalid_transition"
        assert (await client.get(url)).json()["status"] == "cancelled"

    async def test_update_invalid_enum(self, client: AsyncClient, contractor_headers: dict):
        created = await _post_project(client, contractor_headers)
        response = await client.put(
            f"/projects/{created['id']}",
            json={"employmentType": "Seasonal"},
            headers=contractor_headers,
        )
        assert response.status_code == 400

    async def test_update_missing_project(self, client: AsyncClient, contractor_headers: dict):
        response = await client.put(
            f"/projects/{uuid.uuid4()}", json={"title": "x"}, headers=contractor_headers,
        )
        assert response.status_code == 404

    async def test_delete_project(self, client: AsyncClient, contractor_headers: dict):
        created = await _post_project(client, contractor_headers)
        url = f"/projects/{created['id']}"

        first = await client.delete(url, headers=contractor_headers)
        second = await client.delete(url, headers=contractor_headers)

        assert first.status_code == second.status_code == 200
        assert first.json() == {"message": "Project deleted"}
        assert (await client.get(url)).status_code == 404


class TestAuthAndOwnership:

    async def test_writes_require_a_key(self, client: AsyncClient):
        response = await client.post("/projects", json=POSTING)

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    async def test_unknown_key_is_rejected(self, client: AsyncClient):
        response = await client.post(
            "/projects", json=POSTING, headers={"Authorization": "Bearer mk_live_nope"},
        )
        assert response.status_code == 401

    async def test_worker_cannot_post(self, client: AsyncClient, worker_headers: dict):
        response = await client.post("/projects", json=POSTING, headers=worker_headers)

        assert response.status_code == 403
        assert response.json()["code"] == "forbidden"

    async def test_other_contractor_cannot_edit_or_delete(
        self, client: AsyncClient, contractor_headers: dict, other_contractor_headers: dict,
    ):
        created = await _post_project(client, contractor_headers)
        url = f"/projects/{created['id']}"

        edit = await client.put(url, json={"title": "Hijacked"}, headers=other_contractor_headers)
        delete = await client.delete(url, headers=other_contractor_headers)

        assert edit.status_code == 403
        assert delete.status_code == 403
        assert (await client.get(url)).json()["title"] == "Site Engineer"


class TestApplicationsAPI:

    async def test_apply_review_and_list(
        self, client: AsyncClient, contractor_headers: dict, worker_headers: dict,
    ):
        created = await _post_project(client, contractor_headers)
        base = f"/projects/{created['id']}"

        applied = await client.post(
            f"{base}/applications",
            json={"applicantProfile": profile(), "expectedRate": 30},
            headers=worker_headers,
        )
        assert applied.status_code == 201
        assert applied.json()["worker"] == "W1"
        assert applied.json()["status"] == "pending"
        assert applied.json()["applicantProfile"]["businessName"] == "Acme Builders"

        project = (await client.get(base)).json()
        assert project["applicantsCount"] == len(project["workers"]) == 1

        reviewed = await client.put(
            f"{base}/applications/W1", json={"status": "accepted"}, headers=contractor_headers,
        )
        assert reviewed.status_code == 200
        assert reviewed.json()["status"] == "accepted"

        again = await client.put(
            f"{base}/applications/W1", json={"status": "rejected"}, headers=contractor_headers,
        )
        assert again.status_code == 409
        assert again.json()["code"] == "invalid_transition"

        listed = await client.get(
            f"{base}/applications", params={"status": "accepted"}, headers=contractor_headers,
        )
        assert listed.status_code == 200
        assert [a["worker"] for a in listed.json()] == ["W1"]

    async def test_duplicate_application(
        self, client: AsyncClient, contractor_headers: dict, worker_headers: dict,
    ):
        created = await _post_project(client, contractor_headers)
        url = f"/projects/{created['id']}/applications"
        body = {"applicantProfile": profile()}

        await client.post(url, json=body, headers=worker_headers)
        response = await client.post(url, json=body, headers=worker_headers)

        assert response.status_code == 409
        assert response.json()["code"] == "conflict"
        project = (await client.get(f"/projects/{created['id']}")).json()
        assert project["applicantsCount"] == 1

    async def test_apply_to_missing_project(self, client: AsyncClient, worker_headers: dict):
        response = await client.post(
            f"/projects/{uuid.uuid4()}/applications",
            json={"applicantProfile": profile()},
            headers=worker_headers,
        )
        assert response.status_code == 404

    async def test_contractor_cannot_apply(self, client: AsyncClient, contractor_headers: dict):
        created = await _post_project(client, contractor_headers)
        response = await client.post(
            f"/projects/{created['id']}/applications",
            json={"applicantProfile": profile()},
            headers=contractor_headers,
        )
        assert response.status_code == 403

    async def test_invalid_review_decision(
        self, client: AsyncClient, contractor_headers: dict,
    ):
        created = await _post_project(client, contractor_headers)
        response = await client.put(
            f"/projects/{created['id']}/applications/W1",
            json={"status": "pending"},
            headers=contractor_headers,
        )
        assert response.status_code == 400

    async def test_worker_cannot_list_applications(
        self, client: AsyncClient, contractor_headers: dict, worker_headers: dict,
    ):
        created = await _post_project(client, contractor_headers)
        response = await client.get(
            f"/projects/{created['id']}/applications", headers=worker_headers,
        )
        assert response.status_code == 403


class TestContractorDetails:

    @pytest.fixture
    def directory(self) -> ContractorDirectory:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/contractors/C1":
                return httpx.Response(200, json={"id": "C1", "businessName": "Kulkarni & Sons"})
            return httpx.Response(404)

        return ContractorDirectory(
            "http://directory.test", transport=httpx.MockTransport(handler),
        )

    async def test_details_are_resolved_per_response(
        self, client: AsyncClient, contractor_headers: dict, other_contractor_headers: dict,
    ):
        created = await _post_project(client, contractor_headers)
        await _post_project(client, other_contractor_headers)

        one = (await client.get(f"/projects/{created['id']}")).json()
        listed = (await client.get("/projects")).json()

        assert one["contractorDetails"] == {"id": "C1", "businessName": "Kulkarni & Sons"}
        assert [p["contractorDetails"] for p in listed] == [
            {"id": "C1", "businessName": "Kulkarni & Sons"},
            None,
        ]

    async def test_details_are_never_accepted_as_input(
        self, client: AsyncClient, contractor_headers: dict,
    ):
        response = await client.post(
            "/projects",
            json={**POSTING, "contractorDetails": {"businessName": "Fake"}},
            headers=contractor_headers,
        )
        assert response.status_code == 400


class TestHealth:

    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}
