from django.apps import apps

from gala_voting.realtime.runtime import build_runtime
from gala_voting.realtime.runtime import get_runtime


def test_app_builds_one_runtime():
    runtime = get_runtime()
    assert runtime is apps.get_app_config("realtime").runtime
    assert runtime.hub.registry is runtime.registry


def test_build_runtime_is_independent(transport):
    first = build_runtime(transport=transport)
    second = build_runtime(transport=transport)
    first.registry.connect("a")
    assert len(second.registry) == 0
    assert first.sio is not second.sio
