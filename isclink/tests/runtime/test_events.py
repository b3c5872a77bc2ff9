from __future__ import annotations

import threading

from isclink.runtime.events import EventSource, OrderedDispatcher


def test_event_source_add_remove():
    src: EventSource[int] = EventSource("x")
    got = []
    h = got.append

    src += h
    src.fire(1)
    src -= h
    src.fire(2)

    assert got == [1]
    assert src.handlers() == ()


def test_handlers_called_in_registration_order():
    src: EventSource[str] = EventSource("x")
    order = []
    src.add(lambda v: order.append(("a", v)))
    src.add(lambda v: order.append(("b", v)))
    src.fire("e")
    assert order == [("a", "e"), ("b", "e")]


def test_failing_handler_does_not_stop_others():
    src: EventSource[int] = EventSource("x")
    got = []

    def bad(v):
        raise RuntimeError("bad handler")

    src.add(bad)
    src.add(got.append)
    src.fire(5)
    assert got == [5]


def test_dispatcher_delivers_in_post_order():
    a: EventSource[int] = EventSource("a")
    b: EventSource[int] = EventSource("b")
    seen = []
    a.add(lambda v: seen.append(("a", v)))
    b.add(lambda v: seen.append(("b", v)))

    d = OrderedDispatcher()
    d.post(a, 1)
    d.post(b, 2)
    d.post(a, 3)
    d.drain()

    assert seen == [("a", 1), ("b", 2), ("a", 3)]


def test_nested_post_is_delivered_after_current_handler():
    d = OrderedDispatcher()
    src: EventSource[str] = EventSource("s")
    seen = []

    def handler(v):
        seen.append(f"start {v}")
        if v == "outer":
            d.post(src, "inner")
            d.drain()  # returns at once; outer loop delivers it
        seen.append(f"end {v}")

    src.add(handler)
    d.post(src, "outer")
    d.drain()

    assert seen == ["start outer", "end outer", "start inner", "end inner"]


def test_drain_with_empty_queue():
    OrderedDispatcher().drain()


def test_concurrent_posts_are_all_delivered():
    d = OrderedDispatcher()
    src: EventSource[int] = EventSource("s")
    seen = []
    lock = threading.Lock()

    def handler(v):
        with lock:
            seen.append(v)

    src.add(handler)

    def worker(base):
        for i in range(100):
            d.post(src, base + i)
            d.drain()

    threads = [threading.Thread(target=worker, args=(k * 1000,)) for k in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=2.0)
    d.drain()

    assert sorted(seen) == sorted(k * 1000 + i for k in range(4) for i in range(100))
