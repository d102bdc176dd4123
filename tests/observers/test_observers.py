import json
import logging
import threading

from valnode.observers.dispatcher import EventBus
from valnode.observers.events import HostReachable, LifecycleEvent, new_ctx
from valnode.observers.jsonfile import JsonFileObserver
from valnode.observers.logger import LoggerObserver


class Recorder:
    def __init__(self):
        self.events = []

    def notify(self, event):
        self.events.append(event)


class Broken:
    def notify(self, event):
        raise RuntimeError("observer down")


def test_bus_survives_broken_observer():
    rec = Recorder()
    bus = EventBus(observers=[Broken(), rec])
    event = HostReachable(host="aws_node_i-1", **new_ctx("Fuji", "c", run_id="r1"))

    bus.emit(event)

    assert [e.host for e in rec.events] == ["aws_node_i-1"]


def test_bus_stamps_each_event_when_emitted():
    rec = Recorder()
    bus = EventBus(observers=[rec])
    ctx = {**new_ctx("Fuji", "c", run_id="r1"), "ts": "2020-01-01T00:00:00Z"}

    bus.emit(HostReachable(host="aws_node_i-1", **ctx))

    event = rec.events[0]
    assert event.ts != "2020-01-01T00:00:00Z"
    assert event.ts.endswith("Z")
    assert event.run_id == "r1"
    assert event.host == "aws_node_i-1"


def test_json_file_observer_appends_lines(tmp_path):
    path = tmp_path / "logs" / "r1.jsonl"
    obs = JsonFileObserver(path)
    ctx = new_ctx("Devnet", "c", run_id="r1")

    obs.notify(LifecycleEvent(phase="create", status="started", **ctx))
    obs.notify(LifecycleEvent(phase="create", status="done", **ctx))

    lines = [json.loads(line) for line in path.read_text().splitlines()]
    assert [l["status"] for l in lines] == ["started", "done"]
    assert lines[0]["type"] == "LifecycleEvent"
    assert lines[0]["run_id"] == "r1"


def test_logger_observer_logs_at_debug(caplog):
    logger = logging.getLogger("observer-test")
    with caplog.at_level(logging.DEBUG, logger="observer-test"):
        LoggerObserver(logger).notify(HostReachable(host="h1", **new_ctx("Fuji", "c")))
    assert "[EVENT] HostReachable" in caplog.text
    assert "host=h1" in caplog.text


def test_json_file_observer_keeps_lines_whole_across_threads(tmp_path):
    path = tmp_path / "events.jsonl"
    obs = JsonFileObserver(path)
    ctx = new_ctx("Devnet", "c", run_id="r1")

    def _emit(n):
        for i in range(50):
            obs.notify(LifecycleEvent(phase="bootstrap", status="done", message=f"{n}-{i}" * 20, **ctx))

    threads = [threading.Thread(target=_emit, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    lines = [json.loads(line) for line in path.read_text().splitlines()]
    assert len(lines) == 8 * 50
