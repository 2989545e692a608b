"""End-to-end tests through the HTTP API.

The ``client`` fixture runs pipeline workers inline, so a 202 response is
followed by the finished session on the next GET.
"""

from __future__ import annotations

from badgeguide.domain.pipeline.session import advance
from badgeguide.domain.pipeline.steps import GenerationStep


def _create(client, **config) -> str:
    body = {"includeHeroImage": False, "includeSearchData": False, **config}
    r = client.post("/sessions", json=body)
    assert r.status_code == 201
    return r.json()["id"]


def _scanned(client, **config) -> str:
    sid = _create(client, **config)
    assert client.post(f"/sessions/{sid}/scan").status_code == 202
    return sid


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


class TestSessions:

    def test_create_with_defaults(self, client, store):
        r = client.post("/sessions")
        assert r.status_code == 201
        data = r.json()
        assert data["step"] == "IDLE"
        assert data["statusMessage"] == "Ready"
        assert data["progress"] == 0
        assert data["isGenerating"] is False
        assert data["config"]["includeHeroImage"] is True
        assert data["config"]["repoName"].startswith("The Ultimate Guide")
        assert len(store) == 1

    def test_unknown_session(self, client):
        assert client.get("/sessions/nope").status_code == 404
        assert client.post("/sessions/nope/scan").status_code == 404

    def test_update_config(self, client):
        sid = _create(client)
        r = client.patch(f"/sessions/{sid}/config", json={"githubUsername": "@monalisa", "repoName": "Mine"})
        assert r.status_code == 200
        cfg = r.json()["config"]
        assert cfg["githubUsername"] == "monalisa"
        assert cfg["repoName"] == "Mine"
        assert cfg["includeSearchData"] is False

    def test_invalid_username(self, client):
        sid = _create(client)
        r = client.patch(f"/sessions/{sid}/config", json={"githubUsername": "bad name!"})
        assert r.status_code == 422

    def test_config_locked_while_generating(self, client, store):
        sid = _create(client)
        store.save(advance(store.get(sid), GenerationStep.SEARCHING))
        r = client.patch(f"/sessions/{sid}/config", json={"repoName": "Other"})
        assert r.status_code == 409

    def test_poll_omits_heavy_fields(self, client, fake_gemini):
        sid = _scanned(client, includeHeroImage=True)
        client.post(f"/sessions/{sid}/generate")

        data = client.get(f"/sessions/{sid}").json()
        assert data["step"] == "DONE"
        assert data["hasHeroImage"] is True
        for heavy in ("markdown", "heroImageUrl", "searchContext"):
            assert heavy not in data

        result = client.get(f"/sessions/{sid}/result").json()
        assert result["heroImageUrl"] == fake_gemini.hero
        assert result["markdown"] == fake_gemini.readme

    def test_delete(self, client, store):
        sid = _scanned(client)
        assert client.delete(f"/sessions/{sid}").status_code == 204
        assert len(store) == 0
        assert client.get(f"/sessions/{sid}").status_code == 404
        assert client.delete(f"/sessions/{sid}").status_code == 404

    def test_delete_refused_while_generating(self, client, store):
        sid = _create(client)
        store.save(advance(store.get(sid), GenerationStep.THINKING))
        assert client.delete(f"/sessions/{sid}").status_code == 409
        assert len(store) == 1

    def test_finished_sessions_are_released(self, client, monkeypatch, store):
        monkeypatch.setattr(store, "max_sessions", 5)
        ids = []
        for _ in range(50):
            sid = _create(client)
            assert client.post(f"/sessions/{sid}/quick").status_code == 202
            ids.append(sid)
        assert len(store) == 5
        assert client.get(f"/sessions/{ids[-1]}").status_code == 200
        assert client.get(f"/sessions/{ids[0]}").status_code == 404

    def test_reset(self, client):
        sid = _scanned(client)
        r = client.post(f"/sessions/{sid}/reset")
        assert r.status_code == 200
        assert r.json()["step"] == "IDLE"
        assert r.json()["badgeCount"] == 0


# ---------------------------------------------------------------------------
# Scan -> gallery -> generate
# ---------------------------------------------------------------------------


class TestGalleryFlow:

    def test_scan_lands_in_gallery(self, client, sample_badges):
        sid = _create(client, githubUsername="monalisa")
        r = client.post(f"/sessions/{sid}/scan")
        assert r.status_code == 202
        assert r.json()["step"] == "SEARCHING"
        assert r.json()["progress"] == 25

        data = client.get(f"/sessions/{sid}").json()
        assert data["step"] == "GALLERY"
        assert data["badgeCount"] == len(sample_badges)
        assert data["ownedCount"] == 2

    def test_scan_twice_is_conflict(self, client):
        sid = _scanned(client)
        assert client.post(f"/sessions/{sid}/scan").status_code == 409

    def test_scan_failure_sets_alert(self, client, fake_gemini):
        fake_gemini.scan_error = RuntimeError("down")
        sid = _scanned(client)
        data = client.get(f"/sessions/{sid}").json()
        assert data["step"] == "IDLE"
        assert data["alert"] == "Failed to scan badges. Please try again."

    def test_list_filter_sort(self, client):
        sid = _scanned(client)
        r = client.get(f"/sessions/{sid}/badges", params={"filter": "unowned", "sort": "rarity"})
        assert r.status_code == 200
        data = r.json()
        assert data["total"] == 6
        assert data["count"] == 4
        assert [b["rarity"] for b in data["badges"]] == ["Epic", "Rare", "Rare", "Common"]

    def test_search_param(self, client):
        sid = _scanned(client)
        data = client.get(f"/sessions/{sid}/badges", params={"q": "shark"}).json()
        assert [b["id"] for b in data["badges"]] == ["pull-shark"]

    def test_bad_filter_value(self, client):
        sid = _scanned(client)
        assert client.get(f"/sessions/{sid}/badges", params={"filter": "maybe"}).status_code == 422

    def test_list_without_scan(self, client):
        sid = _create(client)
        assert client.get(f"/sessions/{sid}/badges").status_code == 409

    def test_badge_detail_and_toggle(self, client):
        sid = _scanned(client)
        assert client.get(f"/sessions/{sid}/badges/yolo").json()["isOwned"] is False
        r = client.post(f"/sessions/{sid}/badges/yolo/toggle")
        assert r.status_code == 200
        assert r.json()["isOwned"] is True
        assert client.get(f"/sessions/{sid}").json()["ownedCount"] == 3

    def test_unknown_badge(self, client):
        sid = _scanned(client)
        assert client.get(f"/sessions/{sid}/badges/nope").status_code == 404
        assert client.post(f"/sessions/{sid}/badges/nope/toggle").status_code == 404

    def test_custom_badge(self, client):
        sid = _scanned(client)
        r = client.post(f"/sessions/{sid}/badges", json={"name": "Bug Hunter", "emoji": "🐛"})
        assert r.status_code == 201
        badge = r.json()
        assert badge["id"].startswith("custom-")
        assert badge["category"] == "Custom"
        assert badge["isOwned"] is True
        first = client.get(f"/sessions/{sid}/badges", params={"sort": "rarity"}).json()["badges"]
        assert badge["id"] in [b["id"] for b in first]

    def test_generate_and_download(self, client, fake_gemini):
        sid = _scanned(client, repoName="My Badges")
        client.post(f"/sessions/{sid}/badges/yolo/toggle")
        r = client.post(f"/sessions/{sid}/generate")
        assert r.status_code == 202
        assert r.json()["step"] == "THINKING"

        data = client.get(f"/sessions/{sid}").json()
        assert data["step"] == "DONE"
        assert data["progress"] == 100
        assert data["hasMarkdown"] is True
        assert client.get(f"/sessions/{sid}/result").json()["markdown"] == fake_gemini.readme

        (_, badges, repo_name, _hero), = fake_gemini.called("generate_readme_text")
        assert repo_name == "My Badges"
        assert next(b for b in badges if b.id == "yolo").isOwned is True

        dl = client.get(f"/sessions/{sid}/readme.md")
        assert dl.status_code == 200
        assert dl.text == fake_gemini.readme
        assert 'filename="README.md"' in dl.headers["content-disposition"]

    def test_gallery_locked_after_generation(self, client):
        sid = _scanned(client)
        client.post(f"/sessions/{sid}/generate")
        assert client.post(f"/sessions/{sid}/badges/yolo/toggle").status_code == 409
        assert client.post(f"/sessions/{sid}/generate").status_code == 409


# ---------------------------------------------------------------------------
# Direct flow / preview
# ---------------------------------------------------------------------------


class TestQuickAndPreview:

    def test_quick_flow(self, client, fake_gemini):
        sid = _create(client, includeSearchData=True, githubUsername="monalisa")
        r = client.post(f"/sessions/{sid}/quick")
        assert r.status_code == 202
        assert r.json()["step"] == "SEARCHING"

        data = client.get(f"/sessions/{sid}").json()
        assert data["step"] == "DONE"
        assert data["hasSearchContext"] is True
        result = client.get(f"/sessions/{sid}/result").json()
        assert "USER-SPECIFIC CONTEXT (monalisa):" in result["searchContext"]
        assert len(fake_gemini.called("search_badge_context")) == 2

    def test_quick_refused_from_gallery(self, client):
        sid = _scanned(client)
        assert client.post(f"/sessions/{sid}/quick").status_code == 409

    def test_preview_before_generation(self, client):
        sid = _create(client)
        r = client.get(f"/sessions/{sid}/preview")
        assert r.status_code == 200
        assert "text/html" in r.headers["content-type"]
        assert 'class="empty"' in r.text

    def test_preview_follows_theme(self, client):
        sid = _create(client)
        client.post(f"/sessions/{sid}/quick")

        dark = client.get(f"/sessions/{sid}/preview")
        assert '<html class="dark">' in dark.text
        assert "<table>" in dark.text

        client.put("/theme", json={"theme": "light"})
        light = client.get(f"/sessions/{sid}/preview")
        assert "<html>" in light.text

    def test_code_view(self, client, fake_gemini):
        sid = _create(client)
        client.post(f"/sessions/{sid}/quick")
        r = client.get(f"/sessions/{sid}/preview", params={"view": "code"})
        assert r.headers["content-type"].startswith("text/markdown")
        assert r.text == fake_gemini.readme


# ---------------------------------------------------------------------------
# Theme / health
# ---------------------------------------------------------------------------


class TestThemeApi:

    def test_platform_header(self, client):
        r = client.get("/theme", headers={"Sec-CH-Prefers-Color-Scheme": "light"})
        assert r.json() == {"theme": "light", "source": "platform"}

    def test_default_is_dark(self, client):
        assert client.get("/theme").json() == {"theme": "dark", "source": "platform"}

    def test_toggle_persists(self, client):
        assert client.post("/theme/toggle").json() == {"theme": "light", "source": "stored"}
        assert client.get("/theme").json() == {"theme": "light", "source": "stored"}
        assert client.post("/theme/toggle").json()["theme"] == "dark"

    def test_put_invalid(self, client):
        assert client.put("/theme", json={"theme": "sepia"}).status_code == 422

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}
