from dataclasses import dataclass

import pytest

from hoodorm.hooks import LIFECYCLE_EVENTS, HookDispatcher


@dataclass
class Post:
    title: str = ""

    def before_delete(self):
        self.title = "deleting"


@dataclass
class Comment:
    body: str = ""


def test_instance_method_runs_before_handlers():
    dispatcher = HookDispatcher()
    seen = []
    dispatcher.register("before_delete", lambda obj, **context: seen.append((obj.title, context)))
    dispatcher.fire("before_delete", Post(title="draft"), session="s")
    assert seen == [("deleting", {"session": "s"})]


def test_model_specific_handlers_only_fire_for_that_class():
    dispatcher = HookDispatcher()
    seen = []
    dispatcher.register("after_save", lambda obj, **context: seen.append(type(obj).__name__), model=Comment)
    dispatcher.fire("after_save", Post())
    dispatcher.fire("after_save", Comment())
    assert seen == ["Comment"]


def test_unknown_event_is_rejected():
    with pytest.raises(ValueError):
        HookDispatcher().register("before_flush", lambda obj, **context: None)
    assert "before_save" in LIFECYCLE_EVENTS


def test_clear_removes_handlers():
    dispatcher = HookDispatcher()
    seen = []
    dispatcher.register("before_insert", lambda obj, **context: seen.append(obj))
    dispatcher.clear()
    dispatcher.fire("before_insert", Comment())
    assert seen == []
