import threading
from datetime import timedelta

import pytest
from werkzeug.security import check_password_hash

from errors import InvalidOrExpiredCode, UpstreamTransportFailure, ValidationError
from extensions import db
from models.password_reset_code import PasswordResetCode
from models.user import User
from routes.password_reset import generate_reset_code, issue_reset_code, verify_and_reset
from utils.clock import utcnow


def _codes_for(email):
    return PasswordResetCode.query.filter_by(email=email).all()


def _password_matches(user_id, password):
    user = db.session.get(User, user_id)
    return check_password_hash(user.password_hash, password)


def test_unknown_email_gets_generic_response_without_code(client, outbox, app):
    resp = client.post("/send-reset-code", json={"email": "nobody@example.com"})

    assert resp.status_code == 200
    assert resp.get_json() == {
        "success": True,
        "message": "If an account exists, a code will be sent.",
    }
    assert outbox == []
    with app.app_context():
        assert _codes_for("nobody@example.com") == []


def test_known_and_unknown_email_get_identical_responses(client, outbox, account):
    known = client.post("/send-reset-code", json={"email": "user@example.com"})
    unknown = client.post("/send-reset-code", json={"email": "ghost@example.com"})

    assert known.status_code == unknown.status_code == 200
    assert known.get_json() == unknown.get_json()


def test_issue_creates_single_live_row(app_ctx, account, outbox):
    now = utcnow()
    issue_reset_code("user@example.com", now=now)

    rows = _codes_for("user@example.com")
    assert len(rows) == 1
    row = rows[0]
    assert row.used is False
    assert row.expires_at == now + timedelta(minutes=10)
    assert len(row.code) == 6 and row.code.isdigit()
    assert outbox == [{"email": "user@example.com", "code": row.code}]


def test_issue_replaces_previous_row(app_ctx, account, outbox):
    issue_reset_code("user@example.com")
    issue_reset_code("user@example.com")

    rows = _codes_for("user@example.com")
    assert len(rows) == 1
    assert rows[0].code == outbox[-1]["code"]


def test_issue_normalizes_email_case(app_ctx, account, outbox):
    issue_reset_code("  User@Example.COM ")

    assert len(_codes_for("user@example.com")) == 1
    assert outbox[0]["email"] == "user@example.com"


def test_missing_email_is_rejected(client, outbox):
    resp = client.post("/send-reset-code", json={})

    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Email is required"}


def test_email_transport_failure_returns_500(client, account, monkeypatch, app):
    monkeypatch.setattr("routes.password_reset.send_password_reset_code", lambda email, code: False)

    resp = client.post("/send-reset-code", json={"email": "user@example.com"})

    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Failed to send email"}


def test_transport_failure_raises_upstream_error(app_ctx, account, monkeypatch):
    monkeypatch.setattr("routes.password_reset.send_password_reset_code", lambda email, code: False)

    with pytest.raises(UpstreamTransportFailure):
        issue_reset_code("user@example.com")


def test_undelivered_code_is_burned(app_ctx, account, outbox, monkeypatch):
    issue_reset_code("user@example.com")
    delivered = outbox[0]["code"]
    captured = []

    def failing_send(email, code):
        captured.append(code)
        return False

    monkeypatch.setattr("routes.password_reset.send_password_reset_code", failing_send)
    with pytest.raises(UpstreamTransportFailure):
        issue_reset_code("user@example.com")

    rows = _codes_for("user@example.com")
    assert [(row.code, row.used) for row in rows] == [(captured[0], True)]
    with pytest.raises(InvalidOrExpiredCode):
        verify_and_reset("user@example.com", captured[0], "NewPass1!")
    with pytest.raises(InvalidOrExpiredCode):
        verify_and_reset("user@example.com", delivered, "NewPass1!")


def test_successful_reset_updates_password(client, account, outbox, app):
    client.post("/send-reset-code", json={"email": "user@example.com"})
    code = outbox[0]["code"]

    resp = client.post(
        "/reset-password",
        json={"email": "user@example.com", "code": code, "newPassword": "NewPass1!"},
    )

    assert resp.status_code == 200
    assert resp.get_json() == {"success": True, "message": "Password updated successfully"}
    with app.app_context():
        assert _password_matches(account, "NewPass1!")
        assert _codes_for("user@example.com")[0].used is True


def test_wrong_code_then_correct_code(client, account, outbox, app):
    client.post("/send-reset-code", json={"email": "user@example.com"})
    code = outbox[0]["code"]
    wrong = "123456" if code != "123456" else "654321"

    first = client.post(
        "/reset-password",
        json={"email": "user@example.com", "code": wrong, "newPassword": "NewPass1!"},
    )
    assert first.status_code == 400
    assert first.get_json() == {"error": "Invalid or expired code"}

    second = client.post(
        "/reset-password",
        json={"email": "user@example.com", "code": code, "newPassword": "NewPass1!"},
    )
    assert second.status_code == 200
    with app.app_context():
        assert _password_matches(account, "NewPass1!")


def test_code_is_single_use(client, account, outbox):
    client.post("/send-reset-code", json={"email": "user@example.com"})
    body = {"email": "user@example.com", "code": outbox[0]["code"], "newPassword": "NewPass1!"}

    assert client.post("/reset-password", json=body).status_code == 200

    replay = client.post("/reset-password", json={**body, "newPassword": "Another1!"})
    assert replay.status_code == 400
    assert replay.get_json() == {"error": "Invalid or expired code"}


def test_expired_code_is_rejected(app_ctx, account, outbox):
    issued_at = utcnow()
    issue_reset_code("user@example.com", now=issued_at)
    code = outbox[0]["code"]

    with pytest.raises(InvalidOrExpiredCode):
        verify_and_reset("user@example.com", code, "NewPass1!", now=issued_at + timedelta(minutes=11))

    assert _password_matches(account, "OldPass1!")


def test_code_valid_at_exact_expiry(app_ctx, account, outbox):
    issued_at = utcnow()
    issue_reset_code("user@example.com", now=issued_at)

    result = verify_and_reset(
        "user@example.com",
        outbox[0]["code"],
        "NewPass1!",
        now=issued_at + timedelta(minutes=10),
    )
    assert result["success"] is True


def test_expired_code_over_http(client, account, outbox, monkeypatch):
    issued_at = utcnow()
    monkeypatch.setattr("routes.password_reset.utcnow", lambda: issued_at)
    client.post("/send-reset-code", json={"email": "user@example.com"})

    monkeypatch.setattr("routes.password_reset.utcnow", lambda: issued_at + timedelta(minutes=11))
    resp = client.post(
        "/reset-password",
        json={"email": "user@example.com", "code": outbox[0]["code"], "newPassword": "NewPass1!"},
    )

    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Invalid or expired code"}


def test_superseded_code_is_rejected(app_ctx, account, outbox):
    issue_reset_code("user@example.com")
    issue_reset_code("user@example.com")
    first_code, second_code = outbox[0]["code"], outbox[1]["code"]

    if first_code != second_code:
        with pytest.raises(InvalidOrExpiredCode):
            verify_and_reset("user@example.com", first_code, "NewPass1!")

    assert verify_and_reset("user@example.com", second_code, "NewPass1!")["success"] is True


def test_code_for_other_email_is_rejected(app_ctx, account, outbox):
    other = User(username="other", email="other@example.com", password_hash="x")
    db.session.add(other)
    db.session.commit()
    issue_reset_code("user@example.com")

    with pytest.raises(InvalidOrExpiredCode):
        verify_and_reset("other@example.com", outbox[0]["code"], "NewPass1!")


def test_account_removed_after_issue_returns_404(client, account, outbox, app):
    client.post("/send-reset-code", json={"email": "user@example.com"})
    with app.app_context():
        db.session.delete(db.session.get(User, account))
        db.session.commit()

    resp = client.post(
        "/reset-password",
        json={"email": "user@example.com", "code": outbox[0]["code"], "newPassword": "NewPass1!"},
    )

    assert resp.status_code == 404
    assert resp.get_json() == {"error": "User not found"}
    with app.app_context():
        # the code is burned even though the account is gone
        assert _codes_for("user@example.com")[0].used is True


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"email": "user@example.com"},
        {"email": "user@example.com", "code": "123456"},
        {"email": "", "code": "123456", "newPassword": "NewPass1!"},
        {"email": "user@example.com", "code": 123456, "newPassword": "NewPass1!"},
    ],
)
def test_missing_fields_are_rejected(client, body):
    resp = client.post("/reset-password", json=body)

    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Email, code, and new password are required"}


def test_weak_password_rejected_before_code_is_consumed(client, account, outbox, app):
    client.post("/send-reset-code", json={"email": "user@example.com"})
    code = outbox[0]["code"]

    resp = client.post(
        "/reset-password",
        json={"email": "user@example.com", "code": code, "newPassword": "abc12345"},
    )

    assert resp.status_code == 400
    assert "Uppercase letter" in resp.get_json()["error"]
    assert "Special character" in resp.get_json()["error"]
    with app.app_context():
        assert _codes_for("user@example.com")[0].used is False


def test_validation_error_type(app_ctx):
    with pytest.raises(ValidationError):
        verify_and_reset("user@example.com", "", "NewPass1!")


def test_generated_codes_have_six_digits():
    for _ in range(200):
        code = generate_reset_code()
        assert len(code) == 6 and code.isdigit()
        assert 100000 <= int(code) <= 999999

        wide = generate_reset_code(full_range=True)
        assert len(wide) == 6 and wide.isdigit()


def test_send_reset_code_is_rate_limited(client, app, outbox):
    app.config["RATE_LIMIT_ENABLED"] = True

    statuses = [
        client.post("/send-reset-code", json={"email": "user@example.com"}).status_code
        for _ in range(6)
    ]

    assert statuses[:5] == [200] * 5
    assert statuses[5] == 429


def test_cors_preflight_returns_empty_200(client):
    resp = client.options(
        "/reset-password",
        headers={
            "Origin": "https://cravings.example",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "content-type",
        },
    )

    assert resp.status_code == 200
    assert resp.data == b""
    assert resp.headers["Access-Control-Allow-Origin"] == "*"


@pytest.mark.parametrize("body", ["user@example.com", ["user@example.com"], 7])
def test_non_object_bodies_are_rejected(client, outbox, body):
    send = client.post("/send-reset-code", json=body)
    reset = client.post("/reset-password", json=body)

    assert send.status_code == 400
    assert send.get_json() == {"error": "Email is required"}
    assert reset.status_code == 400
    assert reset.get_json() == {"error": "Email, code, and new password are required"}
    assert outbox == []


def _wrong_code(code):
    return "123456" if code != "123456" else "654321"


def test_code_survives_attempts_below_limit(app_ctx, account, outbox):
    issue_reset_code("user@example.com")
    code = outbox[0]["code"]

    for _ in range(4):
        with pytest.raises(InvalidOrExpiredCode):
            verify_and_reset("user@example.com", _wrong_code(code), "NewPass1!")

    assert verify_and_reset("user@example.com", code, "NewPass1!")["success"] is True


def test_code_is_burned_after_too_many_wrong_attempts(app_ctx, account, outbox):
    issue_reset_code("user@example.com")
    code = outbox[0]["code"]

    for _ in range(5):
        with pytest.raises(InvalidOrExpiredCode):
            verify_and_reset("user@example.com", _wrong_code(code), "NewPass1!")

    with pytest.raises(InvalidOrExpiredCode):
        verify_and_reset("user@example.com", code, "NewPass1!")

    row = _codes_for("user@example.com")[0]
    assert row.used is True
    assert row.attempts == 5
    assert _password_matches(account, "OldPass1!")


def test_concurrent_resets_with_same_code_have_single_winner(app, account, outbox):
    with app.app_context():
        issue_reset_code("user@example.com")
    code = outbox[0]["code"]

    passwords = [f"Racer{n}Pass!" for n in range(4)]
    barrier = threading.Barrier(len(passwords))
    outcomes = []
    lock = threading.Lock()

    def attempt(new_password):
        with app.app_context():
            barrier.wait()
            try:
                verify_and_reset("user@example.com", code, new_password)
                outcome = "success"
            except (InvalidOrExpiredCode, UpstreamTransportFailure) as exc:
                outcome = type(exc).__name__
            with lock:
                outcomes.append((outcome, new_password))

    threads = [threading.Thread(target=attempt, args=(password,)) for password in passwords]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(outcomes) == len(passwords)
    winners = [password for outcome, password in outcomes if outcome == "success"]
    assert len(winners) == 1
    assert {outcome for outcome, _ in outcomes if outcome != "success"} <= {
        "InvalidOrExpiredCode",
        "UpstreamTransportFailure",
    }
    with app.app_context():
        assert _password_matches(account, winners[0])
        assert _codes_for("user@example.com")[0].used is True
