"""Unit tests for runtime utilities in runtime.py

Test coverage includes:
    1. Local detection via APP_ENV.
    2. Local detection via AWS SAM CLI.
    3. Deployed environments.
"""

import pytest

from urlkeeper.utils.runtime import running_locally


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv('APP_ENV', raising=False)
    monkeypatch.delenv('AWS_SAM_LOCAL', raising=False)


@pytest.mark.parametrize('app_env', ['local', 'LOCAL'])
def test_running_locally_via_app_env(monkeypatch, app_env):
    """Ensure APP_ENV=local (any case) counts as local."""
    monkeypatch.setenv('APP_ENV', app_env)
    assert running_locally()


def test_running_locally_via_sam(monkeypatch):
    """Ensure AWS_SAM_LOCAL=true counts as local."""
    monkeypatch.setenv('APP_ENV', 'dev')
    monkeypatch.setenv('AWS_SAM_LOCAL', 'true')
    assert running_locally()


@pytest.mark.parametrize('app_env', ['dev', 'prod', None])
def test_not_running_locally(monkeypatch, app_env):
    """Ensure deployed environments are not considered local."""
    if app_env is not None:
        monkeypatch.setenv('APP_ENV', app_env)
    assert not running_locally()
