import pytest


@pytest.fixture
def tag(client, alice):
    headers, _, _ = alice
    return client.post("/tags/", json={"name": "backend", "color": "#ff0000"}, headers=headers).json()


def create_task(client, headers, project_id, **fields):
    payload = {"title": "Write docs", "project_id": project_id}
    payload.update(fields)
    return client.post("/tasks/", json=payload, headers=headers)


class TestCreateTask:

    def test_defaults(self, client, alice, project):
        headers, alice_id, _ = alice
        response = create_task(client, headers, project["id"])

        assert response.status_code == 201, response.text
        body = response.json()
        assert body["status"] == "todo"
        assert body["priority"] == "medium"
        assert body["creator_id"] == alice_id
        assert body["creator"]["name"] == "Alice"
        assert body["project"] == {"id": project["id"], "name": "P"}
        assert body["assignee"] is None
        assert body["tags"] == []

    def test_with_tags_and_assignee(self, client, alice, project, tag):
        headers, alice_id, _ = alice
        response = create_task(
            client, headers, project["id"],
            assignee_id=alice_id, tag_ids=[tag["id"]], priority="high",
            due_date="2030-01-01T12:00:00",
        )

        body = response.json()
        assert body["assignee"]["id"] == alice_id
        assert [t["name"] for t in body["tags"]] == ["backend"]
        assert body["priority"] == "high"
        assert body["due_date"].startswith("2030-01-01T12:00:00")

    def test_unknown_tag(self, client, alice, project):
        headers, _, _ = alice
        response = create_task(client, headers, project["id"], tag_ids=[9999])
        assert response.status_code == 404

    def test_assignee_must_be_member(self, client, alice, bob, project):
        headers, _, _ = alice
        _, bob_id, _ = bob
        response = create_task(client, headers, project["id"], assignee_id=bob_id)
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_non_member_cannot_create(self, client, bob, project):
        headers, _, _ = bob
        assert create_task(client, headers, project["id"]).status_code == 403

    def test_viewer_cannot_create(self, client, alice, bob, project):
        alice_headers, _, _ = alice
        bob_headers, bob_id, _ = bob
        client.post(
            f"/projects/{project['id']}/members",
            json={"user_id": bob_id, "role": "viewer"},
            headers=alice_headers,
        )
        assert create_task(client, bob_headers, project["id"]).status_code == 403

    def test_empty_title_is_rejected(self, client, alice, project):
        headers, _, _ = alice
        assert create_task(client, headers, project["id"], title="").status_code == 422


class TestReadTasks:

    def test_project_tasks_with_status_filter(self, client, alice, project):
        headers, _, _ = alice
        create_task(client, headers, project["id"], title="A")
        create_task(client, headers, project["id"], title="B", status="completed")

        all_tasks = client.get(f"/tasks/project/{project['id']}", headers=headers).json()
        done = client.get(f"/tasks/project/{project['id']}?status=completed", headers=headers).json()

        assert {t["title"] for t in all_tasks} == {"A", "B"}
        assert [t["title"] for t in done] == ["B"]

    def test_outsider_cannot_read(self, client, alice, bob, project):
        alice_headers, _, _ = alice
        bob_headers, _, _ = bob
        task_id = create_task(client, alice_headers, project["id"]).json()["id"]

        assert client.get(f"/tasks/{task_id}", headers=bob_headers).status_code == 403
        assert client.get(f"/tasks/project/{project['id']}", headers=bob_headers).status_code == 403
        assert client.get("/tasks/", headers=bob_headers).json() == []

    def test_assigned_list(self, client, alice, project):
        headers, alice_id, _ = alice
        create_task(client, headers, project["id"], title="Mine", assignee_id=alice_id)
        create_task(client, headers, project["id"], title="Nobody's")

        assigned = client.get("/tasks/assigned", headers=headers).json()
        assert [t["title"] for t in assigned] == ["Mine"]

    def test_missing_task(self, client, alice):
        headers, _, _ = alice
        assert client.get("/tasks/9999", headers=headers).status_code == 404


class TestUpdateTask:

    def test_member_updates_status(self, client, alice, bob, project):
        alice_headers, _, _ = alice
        bob_headers, bob_id, _ = bob
        client.post(
            f"/projects/{project['id']}/members",
            json={"user_id": bob_id, "role": "member"},
            headers=alice_headers,
        )
        task_id = create_task(client, alice_headers, project["id"]).json()["id"]

        response = client.put(
            f"/tasks/{task_id}",
            json={"status": "in-progress", "assignee_id": bob_id},
            headers=bob_headers,
        )
        assert response.status_code == 200, response.text
        assert response.json()["status"] == "in-progress"
        assert response.json()["assignee"]["name"] == "Bob"

    def test_non_member_is_forbidden(self, client, alice, bob, project):
        alice_headers, _, _ = alice
        bob_headers, _, _ = bob
        task_id = create_task(client, alice_headers, project["id"]).json()["id"]

        response = client.put(f"/tasks/{task_id}", json={"status": "completed"}, headers=bob_headers)
        assert response.status_code == 403
        assert client.get(f"/tasks/{task_id}", headers=alice_headers).json()["status"] == "todo"

    def test_tag_ids_replace_tags(self, client, alice, project, tag):
        headers, _, _ = alice
        other = client.post("/tags/", json={"name": "frontend"}, headers=headers).json()
        task_id = create_task(client, headers, project["id"], tag_ids=[tag["id"]]).json()["id"]

        response = client.put(f"/tasks/{task_id}", json={"tag_ids": [other["id"]]}, headers=headers)
        assert [t["name"] for t in response.json()["tags"]] == ["frontend"]

        response = client.put(f"/tasks/{task_id}", json={"tag_ids": []}, headers=headers)
        assert response.json()["tags"] == []

    def test_unassign(self, client, alice, project):
        headers, alice_id, _ = alice
        task_id = create_task(client, headers, project["id"], assignee_id=alice_id).json()["id"]

        response = client.put(f"/tasks/{task_id}", json={"assignee_id": None}, headers=headers)
        assert response.json()["assignee"] is None


class TestDeleteTask:

    def test_delete(self, client, alice, project):
        headers, _, _ = alice
        task_id = create_task(client, headers, project["id"]).json()["id"]

        assert client.delete(f"/tasks/{task_id}", headers=headers).status_code == 204
        assert client.get(f"/tasks/{task_id}", headers=headers).status_code == 404

    def test_outsider_cannot_delete(self, client, alice, bob, project):
        alice_headers, _, _ = alice
        bob_headers, _, _ = bob
        task_id = create_task(client, alice_headers, project["id"]).json()["id"]
        assert client.delete(f"/tasks/{task_id}", headers=bob_headers).status_code == 403
