"""Tests for webhook payload models and their fallbacks."""

import pytest
from pydantic import ValidationError

from planhook.errors import InvalidPayloadError
from planhook.models.github import (
    PullRequestRef,
    RepositoryRef,
    WebhookDelivery,
    installation_id_from,
)

from .helpers import pr_payload


class TestRepositoryRef:
    def test_fallbacks_when_clone_url_and_branch_absent(self):
        repo = RepositoryRef.from_payload({"owner": {"login": "acme"}, "name": "widgets"})
        assert repo.full_name == "acme/widgets"
        assert repo.clone_url == "https://github.com/acme/widgets.git"
        assert repo.default_branch == "main"

    def test_payload_values_win_over_fallbacks(self):
        repo = RepositoryRef.from_payload({
            "id": 7,
            "owner": {"login": "acme"},
            "name": "widgets",
            "clone_url": "https://ghe.example/acme/widgets.git",
            "default_branch": "trunk",
        })
        assert repo.id == 7
        assert repo.clone_url == "https://ghe.example/acme/widgets.git"
        assert repo.default_branch == "trunk"

    def test_missing_owner_is_invalid(self):
        with pytest.raises(InvalidPayloadError):
            RepositoryRef.from_payload({"name": "widgets"})

    def test_missing_repository_is_invalid(self):
        with pytest.raises(InvalidPayloadError):
            RepositoryRef.from_payload(None)


class TestPullRequestRef:
    def test_reads_head_and_base(self):
        pr = PullRequestRef.from_payload(pr_payload()["pull_request"])
        assert pr.number == 42
        assert pr.head_sha == "abcdef1234567"
        assert pr.head_ref == "feature/x"
        assert pr.base_ref == "main"

    def test_head_sha_optional(self):
        pr = PullRequestRef.from_payload({"number": 3})
        assert pr.head_sha is None
        assert pr.head_ref is None

    @pytest.mark.parametrize("number", [None, 0, -1])
    def test_number_must_be_positive(self, number):
        with pytest.raises(InvalidPayloadError, match="number"):
            PullRequestRef.from_payload({"number": number})

    def test_bad_head_sha_names_the_field(self):
        with pytest.raises(InvalidPayloadError, match="head_sha"):
            PullRequestRef.from_payload({"number": 42, "head": {"sha": 1234567}})


class TestWebhookDelivery:
    def test_action_read_from_body(self):
        delivery = WebhookDelivery.from_request("pull_request", "d-1", pr_payload(action="reopened"))
        assert delivery.action == "reopened"
        assert delivery.key == "pull_request.reopened"

    def test_ping_has_no_action(self):
        delivery = WebhookDelivery.from_request("ping", "d-2", {"zen": "Keep it logically awesome."})
        assert delivery.action is None
        assert delivery.key == "ping"

    def test_empty_delivery_id_becomes_none(self):
        assert WebhookDelivery.from_request("ping", "", {}).delivery_id is None

    def test_frozen(self):
        delivery = WebhookDelivery.from_request("ping", "d-2", {})
        with pytest.raises(ValidationError):
            delivery.event_name = "push"


class TestInstallationId:
    def test_present(self):
        assert installation_id_from(pr_payload(installation_id=99)) == 99

    def test_absent(self):
        assert installation_id_from(pr_payload(installation_id=None)) is None

    def test_non_integer_ignored(self):
        assert installation_id_from({"installation": {"id": "99"}}) is None
        assert installation_id_from({"installation": "oops"}) is None
