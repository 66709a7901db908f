"""
Per-request timing, kept outside the login core.

Each request gets a ProcessTime on ``g``. SQL time is collected from
SQLAlchemy cursor events; view time from ``track("view")`` blocks around
response rendering.
"""
import time
from contextlib import contextmanager

from flask import current_app, g, has_request_context, request
from sqlalchemy import event

KINDS = ("db", "view")

MASKED_PARAMS = {"password"}


class ProcessTime:
    def __init__(self):
        self.start_time = time.perf_counter()
        self.process = None
        self.totals = {kind: 0.0 for kind in KINDS}
        self._stacks = {kind: [] for kind in KINDS}

    def start(self, kind: str):
        if kind not in KINDS:
            raise ValueError(f"unknown type: {kind}")
        self._stacks[kind].append(time.perf_counter())

    def finish(self, kind: str):
        if kind not in KINDS:
            raise ValueError(f"unknown type: {kind}")
        if not self._stacks[kind]:
            return
        started = self._stacks[kind].pop()
        self.totals[kind] += time.perf_counter() - started

    def finish_process(self):
        self.process = time.perf_counter() - self.start_time

    def as_ms(self, kind: str) -> float:
        if kind == "process":
            seconds = self.process or 0.0
        elif kind in KINDS:
            seconds = self.totals[kind]
        else:
            raise ValueError(f"unknown type: {kind}")
        return int(seconds * 10000) / 10.0


def _current():
    if not has_request_context():
        return None
    return g.get("process_time")


@contextmanager
def track(kind: str):
    pt = _current()
    if pt is None:
        yield
        return
    pt.start(kind)
    try:
        yield
    finally:
        pt.finish(kind)


def _safe_params() -> dict:
    params = {}
    for source in (request.args, request.form):
        for key in source.keys():
            params[key] = "[FILTERED]" if key in MASKED_PARAMS else source.get(key)
    body = request.get_json(silent=True)
    if isinstance(body, dict):
        for key, value in body.items():
            params[key] = "[FILTERED]" if key in MASKED_PARAMS else value
    return params


def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    pt = _current()
    if pt is not None:
        pt.start("db")


def _after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    pt = _current()
    if pt is not None:
        pt.finish("db")


def init_request_timing(app, engine):
    event.listen(engine, "before_cursor_execute", _before_cursor_execute)
    event.listen(engine, "after_cursor_execute", _after_cursor_execute)

    @app.before_request
    def _start_timer():
        g.process_time = ProcessTime()
        current_app.logger.info(
            'Started %s "%s", Params: %r', request.method, request.path or "/", _safe_params()
        )

    @app.after_request
    def _log_completed(resp):
        pt = g.pop("process_time", None)
        if pt is None:
            return resp
        pt.finish_process()
        current_app.logger.info(
            "Completed %s in %s ms (DB: %s ms, View: %s ms)",
            resp.status_code,
            pt.as_ms("process"),
            pt.as_ms("db"),
            pt.as_ms("view"),
        )
        return resp
