# tests/conftest.py
import os
import sys

import pytest

project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
for path in (
    project_root,
    os.path.join(project_root, "src", "libs", "recovery-calculator-engine", "src"),
    os.path.join(project_root, "src", "libs", "recovery-common"),
):
    if path not in sys.path:
        sys.path.insert(0, path)

from recovery_common.logging_utils import correlation_id_var, request_id_var, trace_id_var  # noqa: E402

LOG_CONTEXT_VARS = (correlation_id_var, request_id_var, trace_id_var)


@pytest.fixture(autouse=True)
def reset_log_context():
    """Keeps correlation ids set by one test from leaking into the next."""
    tokens = [var.set("<not-set>") for var in LOG_CONTEXT_VARS]
    yield
    for var, token in zip(LOG_CONTEXT_VARS, tokens):
        var.reset(token)
