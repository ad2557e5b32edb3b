"""
Tests for the transfer planner — staging, ordering, render/recursive rules.
"""

import pytest

from fleetdrop.core.config.settings import RunSettings
from fleetdrop.core.errors import InvalidRequest
from fleetdrop.core.models.transfer import TransferRequest
from fleetdrop.core.services.transfer_planner import (
    needs_render,
    plan_transfer,
    source_is_template,
    staging_path,
)


def _plan(source="files/nginx.conf", destination="/etc/nginx.conf", **options):
    return plan_transfer(TransferRequest.create(source, destination, **options))


# ── Plain transfers ─────────────────────────────────────────────────


class TestPlainTransfer:
    def test_destination_unchanged_without_sudo(self):
        plan = _plan()
        assert plan.effective_destination == "/etc/nginx.conf"
        assert plan.final_destination == "/etc/nginx.conf"
        assert not plan.staged

    def test_no_actions_by_default(self):
        assert _plan().post_actions == ()

    def test_recursive_by_default(self):
        assert _plan().recursive is True

    def test_recursive_can_be_disabled(self):
        assert _plan(recursive=False).recursive is False

    def test_no_move_without_sudo(self):
        plan = _plan(owner="root", mode="0644")
        assert all(a.kind != "move" for a in plan.post_actions)

    def test_attributes_without_sudo_are_unprivileged(self):
        plan = _plan(owner="www-data", mode="0640")
        assert plan.commands == [
            "chown www-data /etc/nginx.conf",
            "chmod 0640 /etc/nginx.conf",
        ]
        assert not any(a.privileged for a in plan.post_actions)


# ── Sudo staging ────────────────────────────────────────────────────


class TestSudoStaging:
    def test_staging_path_from_basename(self):
        plan = _plan(sudo=True)
        assert plan.effective_destination == "/tmp/fleetdrop_nginx.conf"
        assert plan.final_destination == "/etc/nginx.conf"
        assert plan.staged

    def test_move_is_only_action(self):
        plan = _plan(sudo=True)
        assert plan.commands == ["sudo mv /tmp/fleetdrop_nginx.conf /etc/nginx.conf"]
        assert plan.post_actions[0].kind == "move"
        assert plan.post_actions[0].privileged

    def test_move_first_with_owner_and_mode(self):
        plan = _plan(sudo=True, owner="root", mode="0644")
        assert plan.commands == [
            "sudo mv /tmp/fleetdrop_nginx.conf /etc/nginx.conf",
            "sudo chown root /etc/nginx.conf",
            "sudo chmod 0644 /etc/nginx.conf",
        ]

    def test_move_ahead_of_registered_post_install(self):
        request = TransferRequest.create(
            "files/nginx.conf",
            "/etc/nginx.conf",
            post_install=["service nginx reload"],
            sudo=True,
            owner="root",
        )
        plan = plan_transfer(request)
        assert [a.kind for a in plan.post_actions] == ["move", "custom", "chown"]
        assert plan.commands[1] == "service nginx reload"

    def test_attributes_target_final_destination(self):
        plan = _plan(sudo=True, owner="root", mode="0600")
        for action in plan.post_actions[1:]:
            assert action.target == "/etc/nginx.conf"
            assert "/tmp/" not in action.command

    def test_trailing_slash_destination(self):
        plan = _plan(destination="/srv/app/", sudo=True)
        assert plan.effective_destination == "/tmp/fleetdrop_app"

    def test_custom_staging_settings(self):
        settings = RunSettings(staging_dir="/var/tmp", staging_prefix="stage-", sudo_command="doas")
        request = TransferRequest.create("a.conf", "/etc/a.conf", sudo=True)
        plan = plan_transfer(request, settings)
        assert plan.effective_destination == "/var/tmp/stage-a.conf"
        assert plan.commands == ["doas mv /var/tmp/stage-a.conf /etc/a.conf"]

    def test_paths_with_spaces_are_quoted(self):
        plan = _plan(destination="/etc/my app.conf", sudo=True)
        assert plan.commands == ["sudo mv '/tmp/fleetdrop_my app.conf' '/etc/my app.conf'"]

    def test_staging_path_helper(self):
        assert staging_path("/etc/hosts") == "/tmp/fleetdrop_hosts"


# ── Caller actions ──────────────────────────────────────────────────


class TestCallerActions:
    def test_later_actions_appended_after_attributes(self):
        plan = _plan(sudo=True, mode="0644").with_post_actions("systemctl restart nginx")
        assert [a.kind for a in plan.post_actions] == ["move", "chmod", "custom"]
        assert plan.commands[-1] == "systemctl restart nginx"

    def test_with_post_actions_returns_copy(self):
        plan = _plan()
        extended = plan.with_post_actions("true")
        assert plan.post_actions == ()
        assert len(extended.post_actions) == 1


# ── Render detection ────────────────────────────────────────────────


class TestRenderRules:
    def test_single_line_source_is_path(self):
        assert not source_is_template("files/nginx.conf")

    def test_trailing_newline_is_still_single_line(self):
        assert not source_is_template("files/nginx.conf\n")

    def test_multi_line_source_is_template(self):
        assert source_is_template("line one\nline two")

    def test_multi_line_forces_render(self):
        plan = _plan(source="server {\n  listen 80;\n}")
        assert plan.needs_render is True

    def test_multi_line_forces_recursive_off(self):
        plan = _plan(source="a\nb", recursive=True)
        assert plan.recursive is False

    def test_explicit_render_forces_recursive_off(self):
        plan = _plan(render=True, recursive=True)
        assert plan.needs_render is True
        assert plan.recursive is False

    def test_needs_render_helper(self):
        assert needs_render(TransferRequest.create("x", "/y", render=True))
        assert not needs_render(TransferRequest.create("x", "/y"))

    def test_render_and_sudo_combined(self):
        plan = _plan(source="a\nb", sudo=True, owner="root")
        assert plan.post_actions[0].kind == "move"
        assert plan.recursive is False


# ── Validation ──────────────────────────────────────────────────────


class TestValidation:
    def test_empty_destination_rejected(self):
        with pytest.raises(InvalidRequest, match="destination"):
            _plan(destination="")

    def test_blank_destination_rejected(self):
        with pytest.raises(InvalidRequest):
            _plan(destination="   ")

    def test_empty_source_rejected(self):
        with pytest.raises(InvalidRequest, match="source"):
            _plan(source="")

    def test_request_is_immutable(self):
        request = TransferRequest.create("a", "/b")
        with pytest.raises(Exception):
            request.destination = "/c"
