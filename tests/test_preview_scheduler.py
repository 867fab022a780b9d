import threading
import time

import pytest

from friendly_mermaid.pipeline import PreviewResult
from friendly_mermaid.services.preview_scheduler import PreviewScheduler


class Recorder:
    def __init__(self):
        self.rendered = []
        self.delivered = []
        self.event = threading.Event()

    def render(self, source):
        self.rendered.append(source)
        return PreviewResult(svg_text=source)

    def deliver(self, result):
        self.delivered.append(result.svg_text)
        self.event.set()


def test_rapid_edits_collapse_into_one_pass():
    recorder = Recorder()
    scheduler = PreviewScheduler(recorder.deliver, delay=0.2, render=recorder.render)
    try:
        scheduler.schedule("a")
        scheduler.schedule("ab")
        scheduler.schedule("abc")
        assert recorder.event.wait(2)
        time.sleep(0.1)
        assert recorder.rendered == ["abc"]
        assert recorder.delivered == ["abc"]
    finally:
        scheduler.close()


def test_superseded_pass_is_discarded():
    first_started = threading.Event()
    release_first = threading.Event()
    first_done = threading.Event()
    delivered = []
    second_delivered = threading.Event()

    def render(source):
        if source == "first":
            first_started.set()
            release_first.wait(2)
            first_done.set()
        return PreviewResult(svg_text=source)

    def deliver(result):
        delivered.append(result.svg_text)
        if result.svg_text == "second":
            second_delivered.set()

    scheduler = PreviewScheduler(deliver, delay=0, render=render)
    try:
        scheduler.schedule("first")
        assert first_started.wait(2)
        scheduler.schedule("second")
        assert second_delivered.wait(2)
        release_first.set()
        assert first_done.wait(2)
        time.sleep(0.1)
        assert delivered == ["second"]
    finally:
        release_first.set()
        scheduler.close()


def test_cancel_drops_pending_pass():
    recorder = Recorder()
    scheduler = PreviewScheduler(recorder.deliver, delay=0.2, render=recorder.render)
    scheduler.schedule("a")
    scheduler.cancel()
    assert not recorder.event.wait(0.4)
    assert recorder.rendered == []
    scheduler.close()


def test_generation_increases_per_schedule():
    recorder = Recorder()
    scheduler = PreviewScheduler(recorder.deliver, delay=5, render=recorder.render)
    try:
        assert scheduler.schedule("a") == 1
        assert scheduler.schedule("b") == 2
    finally:
        scheduler.close()


def test_closed_scheduler_refuses_work():
    recorder = Recorder()
    scheduler = PreviewScheduler(recorder.deliver, delay=0, render=recorder.render)
    scheduler.close()
    with pytest.raises(RuntimeError):
        scheduler.schedule("a")
