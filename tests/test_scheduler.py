import threading
import time

import pytest

from themepack_engine.errors import ParseError, SchedulingError, TaskFailedError
from themepack_engine.models import LangResult, TaskDescriptor, TaskKind, TemplateResult
from themepack_engine.scheduler import map_concurrently, run_concurrently, run_descriptors

NAMES = ["css", "templates", "lang", "jspm_bundle"]
# Staggered so completion order differs from submission order
DELAYS = {"css": 0.04, "templates": 0.01, "lang": 0.03, "jspm_bundle": 0.0}


def _task(name, fail=None):
    def run():
        time.sleep(DELAYS[name])
        if fail is not None:
            raise fail
        return f"{name}-result"

    return run


def test_all_tasks_succeed_returns_every_key():
    results = run_concurrently({name: _task(name) for name in NAMES})

    assert set(results) == set(NAMES)
    for name in NAMES:
        assert results[name] == f"{name}-result"


@pytest.mark.parametrize("failing", NAMES)
def test_single_failure_is_reported_regardless_of_position(failing):
    error = ParseError(f"{failing} broke")
    tasks = {name: _task(name, fail=error if name == failing else None) for name in NAMES}

    with pytest.raises(TaskFailedError) as exc_info:
        run_concurrently(tasks)

    assert exc_info.value.task == failing
    assert exc_info.value.cause is error
    assert exc_info.value.__cause__ is error
    assert isinstance(exc_info.value, SchedulingError)


def test_siblings_run_to_completion_after_a_failure():
    finished = []

    def slow():
        time.sleep(0.05)
        finished.append("slow")
        return "slow"

    def broken():
        raise ParseError("broken")

    with pytest.raises(TaskFailedError):
        run_concurrently({"slow": slow, "broken": broken})

    assert finished == ["slow"]


def test_tasks_run_in_parallel():
    barrier = threading.Barrier(3, timeout=5)

    def wait():
        barrier.wait()
        return True

    assert run_concurrently({i: wait for i in range(3)}) == {0: True, 1: True, 2: True}


def test_empty_task_set():
    assert run_concurrently({}) == {}


def test_run_descriptors_keys_by_kind():
    descriptors = [
        TaskDescriptor(kind=TaskKind.TEMPLATES, run=lambda: TemplateResult(templates={"pages/home": {}})),
        TaskDescriptor(kind=TaskKind.LANG, run=lambda: LangResult(value={"en": {}})),
    ]

    results = run_descriptors(descriptors)

    assert set(results) == {TaskKind.TEMPLATES, TaskKind.LANG}
    assert results[TaskKind.LANG].value == {"en": {}}


def test_run_descriptors_rejects_duplicate_kinds():
    descriptors = [
        TaskDescriptor(kind=TaskKind.LANG, run=lambda: LangResult(value={})),
        TaskDescriptor(kind=TaskKind.LANG, run=lambda: LangResult(value={})),
    ]
    with pytest.raises(ValueError):
        run_descriptors(descriptors)


def test_map_concurrently_joins_by_key_not_arrival():
    delays = {"a": 0.03, "b": 0.0, "c": 0.015}

    def parse(key):
        time.sleep(delays[key])
        return key.upper()

    assert map_concurrently(parse, ["a", "b", "c"]) == {"a": "A", "b": "B", "c": "C"}


def test_map_concurrently_propagates_original_error():
    def parse(key):
        if key == "bad":
            raise ParseError("bad file")
        return key

    with pytest.raises(ParseError, match="bad file"):
        map_concurrently(parse, ["good", "bad", "other"])


def test_map_concurrently_skips_unstarted_work_after_failure():
    started = []

    def parse(key):
        started.append(key)
        if key == 0:
            raise ParseError("first item fails")
        time.sleep(0.01)
        return key

    with pytest.raises(ParseError):
        map_concurrently(parse, range(200), max_workers=1)

    assert len(started) < 200
