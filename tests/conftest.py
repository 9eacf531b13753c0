"""Shared test fixtures for InfraSeal tests."""
import json

import pytest
import yaml


@pytest.fixture
def declared_state():
    """Declared (IaC) state from the production demo."""
    return {
        "env": "production",
        "dbVersion": "postgres-14.5",
        "securityGroup": ["allow_ssh", "allow_web"],
        "tags": {"owner": "akshaya", "cost_center": "voryx"},
    }


@pytest.fixture
def drifted_live_state():
    """Live state with a database upgrade, a missing firewall rule and an extra tag."""
    return {
        "env": "production",
        "dbVersion": "postgres-15.0",
        "securityGroup": ["allow_ssh"],
        "tags": {"owner": "akshaya", "cost_center": "voryx", "temp_tag": "test"},
    }


@pytest.fixture
def write_yaml(tmp_path):
    """Write a document as YAML under tmp_path and return its path."""
    def _write(name, data):
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data, sort_keys=False))
        return path
    return _write


@pytest.fixture
def write_json(tmp_path):
    """Write a document as JSON under tmp_path and return its path."""
    def _write(name, data):
        path = tmp_path / name
        path.write_text(json.dumps(data))
        return path
    return _write
