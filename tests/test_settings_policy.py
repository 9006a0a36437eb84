import textwrap

from core.policy import LOGIN_ROLES, can_edit_page, can_view_page, visible_pages_for
from core.settings import load_settings


def test_settings_file_and_env_overrides(tmp_path, monkeypatch):
    path = tmp_path / "settings.yaml"
    path.write_text(textwrap.dedent("""
        app:
          debug: true
        api:
          base_url: "http://files-say-this/"
        courses:
          numbering_bands:
            "NCE I": { FIRST: 110, SECOND: 120 }
    """))
    monkeypatch.delenv("ADMIN_CONSOLE_STORAGE_URL", raising=False)
    monkeypatch.setenv("ADMIN_CONSOLE_API_BASE", "http://env-wins:9000/")

    s = load_settings(path)

    assert s.app.debug is True
    assert s.api.base_url == "http://env-wins:9000"
    assert s.storage.url == "sqlite:///data/client_storage.db"
    assert s.ui.page_sizes == [10, 20, 50, 100]
    assert s.courses.numbering_bands["NCE I"]["SECOND"] == 120


def test_missing_settings_file_uses_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("ADMIN_CONSOLE_API_BASE", raising=False)
    s = load_settings(tmp_path / "nope.yaml")
    assert s.api.base_url == "http://localhost:8080"
    assert s.api.timeout_seconds == 15


def test_admin_roles_see_every_page():
    pages = visible_pages_for({"ADMIN"})
    assert "Courses" in pages and "Credit Hours" in pages
    assert visible_pages_for({"SUPERADMIN"}) == pages


def test_staff_sees_nothing():
    assert visible_pages_for({"STAFF"}) == []
    assert not can_view_page("Faculties", {"STAFF"})
    assert not can_edit_page("Faculties", set())


def test_login_roles():
    assert LOGIN_ROLES == {"ADMIN", "SUPERADMIN"}
