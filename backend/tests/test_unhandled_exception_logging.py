import logging

from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.main import unhandled_exception_handler


def test_unhandled_exception_logs_traceback(caplog):
    app = FastAPI()
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.get("/boom")
    def boom():
        raise ValueError("ledger exploded")

    client = TestClient(app, raise_server_exceptions=False)
    with caplog.at_level(logging.ERROR):
        response = client.get("/boom")

    assert response.status_code == 500
    body = response.json()
    assert body["code"] == "internal_server_error"
    # Internal details stay in the log, not in the response.
    assert "ledger exploded" not in body["detail"]
    record = next((r for r in caplog.records if r.message == "Unhandled exception"), None)
    assert record is not None
    assert record.exc_info[0] is ValueError
    assert "ValueError: ledger exploded" in caplog.text
