"""API endpoint tests."""

import pytest
from conftest import register


def create_project(client, headers, name="Roadmap"):
    response = client.post("/api/v1/projects", headers=headers, json={"name": name})
    assert response.status_code == 201
    return response.json()["id"]


def create_list(client, headers, project_id, name="Backlog"):
    response = client.post(
        f"/api/v1/projects/{project_id}/lists", headers=headers, json={"name": name}
    )
    assert response.status_code == 201
    return response.json()["id"]


def create_task(client, headers, list_id, title="Write docs"):
    response = client.post(f"/api/v1/lists/{list_id}/tasks", headers=headers, json={"title": title})
    assert response.status_code == 201
    return response.json()["id"]


def add_member(client, headers, project_id, email, role):
    response = client.post(
        f"/api/v1/projects/{project_id}/members",
        headers=headers,
        json={"user_email": email, "role": role},
    )
    assert response.status_code == 201


@pytest.fixture
def workspace(client, auth_headers):
    """Project with list Backlog (two tasks) and list Doing (one task)."""
    project_id = create_project(client, auth_headers)
    backlog = create_list(client, auth_headers, project_id, "Backlog")
    doing = create_list(client, auth_headers, project_id, "Doing")
    return {
        "project": project_id,
        "backlog": backlog,
        "doing": doing,
        "t1": create_task(client, auth_headers, backlog, "Write docs"),
        "t2": create_task(client, auth_headers, backlog, "Fix login"),
        "t3": create_task(client, auth_headers, doing, "Ship it"),
    }


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_register_user(client):
    """Test user registration."""
    response = client.post(
        "/api/v1/auth/register",
        json={"email": "newuser@example.com", "password": "password123", "name": "New User"},
    )
    assert response.status_code == 201
    assert "access_token" in response.json()
    assert response.json()["user"]["plan"] == "free"


def test_register_duplicate_email(client, auth_headers):
    """Test registration with duplicate email fails."""
    response = client.post(
        "/api/v1/auth/register",
        json={"email": auth_headers.email, "password": "password123", "name": "Duplicate"},
    )
    assert response.status_code == 400
    assert "already registered" in response.json()["detail"]


def test_login(client, auth_headers):
    """Test user login."""
    response = client.post(
        "/api/v1/auth/login", json={"email": auth_headers.email, "password": "testpass123"}
    )
    assert response.status_code == 200
    assert "access_token" in response.json()


def test_login_wrong_password(client, auth_headers):
    """Test login with wrong password."""
    response = client.post(
        "/api/v1/auth/login", json={"email": auth_headers.email, "password": "wrongpass"}
    )
    assert response.status_code == 401


def test_get_current_user(client, auth_headers):
    """Test getting current user info."""
    response = client.get("/api/v1/auth/me", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["email"] == auth_headers.email


# ----------------------------------------------------------------------
# Projects, lists, tasks
# ----------------------------------------------------------------------


def test_create_and_get_project(client, auth_headers):
    project_id = create_project(client, auth_headers, "Website")

    response = client.get(f"/api/v1/projects/{project_id}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["name"] == "Website"
    assert response.json()["owner_id"] == auth_headers.user_id

    response = client.get("/api/v1/projects", headers=auth_headers)
    assert [p["id"] for p in response.json()] == [project_id]


def test_lists_and_tasks(client, auth_headers, workspace):
    response = client.get(f"/api/v1/projects/{workspace['project']}/lists", headers=auth_headers)
    assert [lst["name"] for lst in response.json()] == ["Backlog", "Doing"]
    assert [lst["position"] for lst in response.json()] == [1, 2]

    response = client.get(f"/api/v1/lists/{workspace['backlog']}/tasks", headers=auth_headers)
    assert [task["title"] for task in response.json()] == ["Write docs", "Fix login"]
    assert response.json()[0]["created_by"] == auth_headers.user_id


def test_duplicate_list_name_conflicts(client, auth_headers, workspace):
    response = client.post(
        f"/api/v1/projects/{workspace['project']}/lists",
        headers=auth_headers,
        json={"name": "backlog"},
    )
    assert response.status_code == 409


def test_trashed_list_name_can_be_reused(client, auth_headers, workspace):
    client.delete(f"/api/v1/lists/{workspace['doing']}", headers=auth_headers)

    response = client.post(
        f"/api/v1/projects/{workspace['project']}/lists",
        headers=auth_headers,
        json={"name": "Doing"},
    )
    assert response.status_code == 201


def test_viewer_cannot_add_tasks(client, auth_headers, workspace):
    viewer = register(client, "viewer@example.com", "Viewer")
    add_member(client, auth_headers, workspace["project"], viewer.email, "viewer")

    response = client.post(
        f"/api/v1/lists/{workspace['backlog']}/tasks", headers=viewer, json={"title": "Nope"}
    )
    assert response.status_code == 403

    response = client.get(f"/api/v1/lists/{workspace['backlog']}/tasks", headers=viewer)
    assert response.status_code == 200


def test_only_owner_manages_members(client, auth_headers, workspace):
    editor = register(client, "editor@example.com", "Editor")
    register(client, "third@example.com", "Third")
    add_member(client, auth_headers, workspace["project"], editor.email, "editor")

    response = client.post(
        f"/api/v1/projects/{workspace['project']}/members",
        headers=editor,
        json={"user_email": "third@example.com", "role": "viewer"},
    )
    assert response.status_code == 403

    response = client.post(
        f"/api/v1/projects/{workspace['project']}/members",
        headers=auth_headers,
        json={"user_email": editor.email, "role": "viewer"},
    )
    assert response.status_code == 400


# ----------------------------------------------------------------------
# Soft delete and restore
# ----------------------------------------------------------------------


def test_delete_list_hides_its_tasks(client, auth_headers, workspace):
    response = client.delete(f"/api/v1/lists/{workspace['backlog']}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["affected"] == 3
    assert response.json()["counts"] == {"project": 0, "list": 1, "task": 2}

    response = client.get(f"/api/v1/projects/{workspace['project']}/lists", headers=auth_headers)
    assert [lst["name"] for lst in response.json()] == ["Doing"]

    response = client.get(f"/api/v1/tasks/{workspace['t1']}", headers=auth_headers)
    assert response.status_code == 404


def test_restore_task_under_trashed_list(client, auth_headers, workspace):
    client.delete(f"/api/v1/lists/{workspace['backlog']}", headers=auth_headers)

    response = client.patch(f"/api/v1/trash/tasks/{workspace['t1']}/restore", headers=auth_headers)
    assert response.status_code == 409
    assert response.json()["code"] == "precondition_failed"
    assert "Backlog" in response.json()["detail"]

    response = client.patch(
        f"/api/v1/trash/lists/{workspace['backlog']}/restore", headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json()["affected"] == 3

    response = client.get(f"/api/v1/tasks/{workspace['t1']}", headers=auth_headers)
    assert response.status_code == 200


def test_delete_project_and_restore(client, auth_headers, workspace):
    response = client.delete(f"/api/v1/projects/{workspace['project']}", headers=auth_headers)
    assert response.json()["affected"] == 6

    assert client.get("/api/v1/projects", headers=auth_headers).json() == []

    response = client.patch(
        f"/api/v1/trash/projects/{workspace['project']}/restore", headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json()["counts"] == {"project": 1, "list": 2, "task": 3}


def test_restore_active_item_is_invalid(client, auth_headers, workspace):
    response = client.patch(f"/api/v1/trash/tasks/{workspace['t3']}/restore", headers=auth_headers)
    assert response.status_code == 409
    assert response.json()["code"] == "invalid_state"


def test_force_delete_active_item_is_invalid(client, auth_headers, workspace):
    response = client.delete(f"/api/v1/trash/lists/{workspace['doing']}", headers=auth_headers)
    assert response.status_code == 409
    assert response.json()["code"] == "invalid_state"


def test_outsider_sees_not_found(client, auth_headers, workspace):
    outsider = register(client, "outsider@example.com", "Outsider")

    response = client.delete(f"/api/v1/tasks/{workspace['t1']}", headers=outsider)
    assert response.status_code == 404
    assert response.json()["code"] == "not_found"

    response = client.get(f"/api/v1/projects/{workspace['project']}/trash", headers=outsider)
    assert response.status_code == 404


def test_editor_cannot_trash(client, auth_headers, workspace):
    editor = register(client, "editor@example.com", "Editor")
    add_member(client, auth_headers, workspace["project"], editor.email, "editor")

    response = client.delete(f"/api/v1/tasks/{workspace['t1']}", headers=editor)
    assert response.status_code == 403
    assert response.json()["code"] == "forbidden"


# ----------------------------------------------------------------------
# Trash views
# ----------------------------------------------------------------------


def test_global_trash(client, auth_headers, workspace):
    client.delete(f"/api/v1/tasks/{workspace['t3']}", headers=auth_headers)
    client.delete(f"/api/v1/lists/{workspace['backlog']}", headers=auth_headers)

    response = client.get("/api/v1/trash", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["retention_days"] == 7
    assert [lst["name"] for lst in data["lists"]] == ["Backlog"]
    assert data["lists"][0]["tasks_count"] == 2
    assert data["lists"][0]["expires_at"].endswith("Z")
    assert {task["name"] for task in data["tasks"]} == {"Write docs", "Fix login", "Ship it"}

    cascaded = next(task for task in data["tasks"] if task["name"] == "Write docs")
    assert cascaded["trash_state"] == "trashed_cascaded"
    assert cascaded["trashed_via"] == {"kind": "list", "id": workspace["backlog"]}


def test_empty_global_trash(client, auth_headers, workspace):
    client.delete(f"/api/v1/lists/{workspace['backlog']}", headers=auth_headers)

    response = client.delete("/api/v1/trash", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["affected"] == 3

    data = client.get("/api/v1/trash", headers=auth_headers).json()
    assert data["lists"] == [] and data["tasks"] == []

    response = client.patch(
        f"/api/v1/trash/lists/{workspace['backlog']}/restore", headers=auth_headers
    )
    assert response.status_code == 404


def test_force_delete_from_trash(client, auth_headers, workspace):
    client.delete(f"/api/v1/tasks/{workspace['t2']}", headers=auth_headers)

    response = client.delete(f"/api/v1/trash/tasks/{workspace['t2']}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["operation"] == "force_delete"

    response = client.get(f"/api/v1/lists/{workspace['backlog']}/tasks", headers=auth_headers)
    assert [task["title"] for task in response.json()] == ["Write docs"]


def test_project_trash_for_viewer(client, auth_headers, workspace):
    viewer = register(client, "viewer@example.com", "Viewer")
    add_member(client, auth_headers, workspace["project"], viewer.email, "viewer")
    client.delete(f"/api/v1/tasks/{workspace['t1']}", headers=auth_headers)
    base = f"/api/v1/projects/{workspace['project']}/trash"

    response = client.get(base, headers=viewer)
    assert response.status_code == 200
    assert [task["name"] for task in response.json()["tasks"]] == ["Write docs"]

    response = client.patch(f"{base}/tasks/{workspace['t1']}/restore", headers=viewer)
    assert response.status_code == 403

    response = client.delete(base, headers=viewer)
    assert response.status_code == 403

    response = client.patch(f"{base}/tasks/{workspace['t1']}/restore", headers=auth_headers)
    assert response.status_code == 200


def test_project_trash_rejects_items_of_other_projects(client, auth_headers, workspace):
    other_project = create_project(client, auth_headers, "Other")
    other_list = create_list(client, auth_headers, other_project, "Elsewhere")
    client.delete(f"/api/v1/lists/{other_list}", headers=auth_headers)

    response = client.patch(
        f"/api/v1/projects/{workspace['project']}/trash/lists/{other_list}/restore",
        headers=auth_headers,
    )
    assert response.status_code == 404

    response = client.delete(
        f"/api/v1/projects/{workspace['project']}/trash/projects/{other_project}",
        headers=auth_headers,
    )
    assert response.status_code == 404


def test_empty_project_trash(client, auth_headers, workspace):
    client.delete(f"/api/v1/lists/{workspace['doing']}", headers=auth_headers)
    client.delete(f"/api/v1/tasks/{workspace['t1']}", headers=auth_headers)

    response = client.delete(
        f"/api/v1/projects/{workspace['project']}/trash", headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json()["counts"] == {"project": 0, "list": 1, "task": 2}

    response = client.get(f"/api/v1/projects/{workspace['project']}", headers=auth_headers)
    assert response.status_code == 200


def test_restore_list_whose_name_was_reused(client, auth_headers, workspace):
    client.delete(f"/api/v1/lists/{workspace['doing']}", headers=auth_headers)
    create_list(client, auth_headers, workspace["project"], "Doing")

    response = client.patch(
        f"/api/v1/trash/lists/{workspace['doing']}/restore", headers=auth_headers
    )
    assert response.status_code == 409
    assert response.json()["code"] == "precondition_failed"
    assert "Doing" in response.json()["detail"]
