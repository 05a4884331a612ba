# Copyright 2024-2025 pydss authors. All rights reserved.

from pydss.utils import get_host_configuration


def test_num_threads_from_environment(monkeypatch):
    monkeypatch.setenv("OMP_NUM_THREADS", "4")
    assert get_host_configuration()["num_threads"] == 4

    monkeypatch.delenv("OMP_NUM_THREADS")
    assert get_host_configuration()["num_threads"] == 0

    monkeypatch.setenv("OMP_NUM_THREADS", "many")
    assert get_host_configuration()["num_threads"] == 0


def test_host_id(monkeypatch):
    monkeypatch.setenv("HOSTNAME", "node-042")
    host = get_host_configuration()

    assert host["host_id"] == "node-042"
    assert host["platform"] != ""
