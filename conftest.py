# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Iterator

import pytest


@pytest.fixture
def executor() -> Iterator[Executor]:
    """A small pool for code that fans work out across threads."""
    with ThreadPoolExecutor(max_workers=4, thread_name_prefix="test") as pool:
        yield pool


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item: pytest.Item, call: pytest.CallInfo[None]):
    outcome = yield
    report = outcome.get_result()
    skipped = call.excinfo is not None and call.excinfo.errisinstance(pytest.skip.Exception)
    if item.config.getoption("--noskip") and report.skipped and skipped:
        report.outcome = "failed"
        report.longrepr = f"Skipped under --noskip: {call.excinfo.exconly()}"


def pytest_addoption(parser):
    parser.addoption(
        "--noskip", action="store_true", default=False, help="Fail tests that skip themselves."
    )
