"""
Shared test fixtures and configuration.
"""

import textwrap
from pathlib import Path

import pytest

from fleetdrop.adapters.mock import MockDeliveryAdapter


@pytest.fixture
def mock_adapter() -> MockDeliveryAdapter:
    """A delivery adapter that records calls and always succeeds."""
    return MockDeliveryAdapter()


@pytest.fixture
def template_file(tmp_path: Path) -> Path:
    """A one-line jinja2 template on disk."""
    path = tmp_path / "nginx.conf.j2"
    path.write_text("listen {{ port }};\n", encoding="utf-8")
    return path


@pytest.fixture
def packages_yml(tmp_path: Path) -> Path:
    """A packages.yml with two nginx versions and one plain package."""
    (tmp_path / "files").mkdir()
    (tmp_path / "files" / "nginx.conf").write_text("worker_processes 1;\n")
    content = textwrap.dedent("""\
        hosts:
          web: [web1, web2]
          db: [db1]
        ssh:
          user: deploy
          port: 2222
        packages:
          - name: nginx
            version: "1.0"
            transfers:
              - source: files/nginx.conf
                destination: /etc/nginx/nginx.conf
                sudo: true
                owner: root
                mode: "0644"
          - name: nginx
            version: "2.0"
            description: "Second cut"
            transfers:
              - source: files/nginx.conf
                destination: /etc/nginx/nginx.conf
          - name: motd
            vars:
              site: example
            transfers:
              - source: |
                  Welcome to {{ site }}
                  Be nice.
                destination: /etc/motd
                post_install:
                  - "echo done"
    """)
    path = tmp_path / "packages.yml"
    path.write_text(content)
    return path
