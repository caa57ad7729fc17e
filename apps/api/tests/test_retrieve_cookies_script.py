import pytest

from scripts import retrieve_cookies
from services.instagram import CookieRetrievalResult


def _fake_fetch(result):
    calls = []

    async def fetch(username, password):
        calls.append((username, password))
        return result

    return fetch, calls


def test_success_prints_cookies_and_writes_file(tmp_path, monkeypatch, capsys):
    result = CookieRetrievalResult(
        success=True,
        message="Successfully retrieved Instagram cookies",
        cookies={"csrftoken": "c1", "sessionid": "s1"},
        cookie_string="csrftoken=c1; sessionid=s1",
    )
    fetch, calls = _fake_fetch(result)
    monkeypatch.setattr(retrieve_cookies, "fetch_cookies", fetch)
    output = tmp_path / "cookies.txt"

    exit_code = retrieve_cookies.main(["alice", "hunter2", "--output", str(output)])

    assert exit_code == 0
    assert calls == [("alice", "hunter2")]
    assert output.read_text(encoding="utf-8") == "csrftoken=c1; sessionid=s1"
    assert "sessionid: s1" in capsys.readouterr().out


def test_missing_password_is_prompted(monkeypatch):
    result = CookieRetrievalResult(success=True, message="ok", cookies={}, cookie_string="")
    fetch, calls = _fake_fetch(result)
    monkeypatch.setattr(retrieve_cookies, "fetch_cookies", fetch)
    monkeypatch.setattr(retrieve_cookies.getpass, "getpass", lambda prompt: "prompted-pw")

    assert retrieve_cookies.main(["alice"]) == 0
    assert calls == [("alice", "prompted-pw")]


def test_failed_login_exits_with_one(monkeypatch, capsys):
    fetch, _ = _fake_fetch(CookieRetrievalResult(success=False, message="Failed to retrieve CSRF token"))
    monkeypatch.setattr(retrieve_cookies, "fetch_cookies", fetch)

    assert retrieve_cookies.main(["alice", "hunter2"]) == 1
    assert "Failed to retrieve CSRF token" in capsys.readouterr().err


def test_help_exits_cleanly():
    with pytest.raises(SystemExit) as exc:
        retrieve_cookies.main(["--help"])
    assert exc.value.code == 0
