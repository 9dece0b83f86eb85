"""Unit tests for QueryInfo, QueryResolver and PermissionResult."""

from __future__ import annotations

import asyncio

import pytest
import structlog

from roleacl.access.conditions import ConditionEvaluator
from roleacl.access.grants import GrantStore, Possession
from roleacl.access.query import PermissionResult, QueryInfo, QueryResolver
from roleacl.kernel.errors import InvalidGrantsFormatError, MissingRequiredFieldError

ACTIVE_ONLY = {"AND": [{"EQUALS": {"path": "context.status", "value": "active"}}]}


def _resolver(records=None, grants=None) -> QueryResolver:
    store = GrantStore(grants if grants is not None else records)
    return QueryResolver(store, ConditionEvaluator())


def _run(coro):
    return asyncio.run(coro)


# ---------------------------------------------------------------------------
# QueryInfo
# ---------------------------------------------------------------------------


class TestQueryInfo:
    def test_from_mapping_splits_action(self) -> None:
        info = QueryInfo.of({"role": "user", "resource": "profile", "action": "read:own"})
        assert info.roles == ("user",)
        assert info.action == "read"
        assert info.possession is Possession.OWN
        assert info.action_name == "read:own"

    def test_explicit_possession_wins(self) -> None:
        info = QueryInfo.of({"role": "u", "action": "read:own", "possession": "any"})
        assert info.possession is Possession.ANY

    def test_role_list(self) -> None:
        assert QueryInfo.of({"role": ["a", "b"]}).roles == ("a", "b")
        assert QueryInfo.of(["a", "b"]).roles == ("a", "b")

    def test_passthrough(self) -> None:
        info = QueryInfo(roles=("a",))
        assert QueryInfo.of(info) is info

    def test_require(self) -> None:
        with pytest.raises(MissingRequiredFieldError) as exc_info:
            QueryInfo.of({"role": "u", "resource": "r"}).require("role", "resource", "action")
        assert exc_info.value.field == "action"

    def test_rejects_other_types(self) -> None:
        with pytest.raises(InvalidGrantsFormatError):
            QueryInfo.of(42)  # type: ignore[arg-type]

    def test_frozen(self) -> None:
        info = QueryInfo.of("u")
        with pytest.raises((AttributeError, TypeError)):
            info.resource = "x"  # type: ignore[misc]


# ---------------------------------------------------------------------------
# permission
# ---------------------------------------------------------------------------


class TestPermission:
    def test_round_trip_with_filter(self) -> None:
        resolver = _resolver([
            {"role": "user", "resource": "profile", "action": "read:own", "attributes": ["*", "!password"]},
        ])
        result = _run(resolver.permission(
            {"role": "user", "resource": "profile", "action": "read", "possession": "own"}
        ))
        assert result.granted is True
        assert result.attributes == ("*", "!password")
        assert result.filter({"name": "x", "password": "y"}) == {"name": "x"}

    def test_own_grant_does_not_answer_any_query(self) -> None:
        resolver = _resolver([{"role": "user", "resource": "profile", "action": "read:own"}])
        result = _run(resolver.permission({"role": "user", "resource": "profile", "action": "read:any"}))
        assert result.granted is False
        assert result.attributes == ()

    def test_any_grant_answers_own_query(self) -> None:
        resolver = _resolver([{"role": "user", "resource": "video", "action": "read:any"}])
        result = _run(resolver.permission({"role": "user", "resource": "video", "action": "read:own"}))
        assert result.granted is True

    def test_unmatched_query_is_not_an_error(self) -> None:
        resolver = _resolver([{"role": "user", "resource": "video", "action": "read"}])
        result = _run(resolver.permission({"role": "ghost", "resource": "video", "action": "read"}))
        assert not result
        assert result.granted is False

    def test_requires_role_resource_action(self) -> None:
        resolver = _resolver([])
        with pytest.raises(MissingRequiredFieldError):
            _run(resolver.permission({"role": "user", "resource": "video"}))
        with pytest.raises(MissingRequiredFieldError):
            _run(resolver.permission({"resource": "video", "action": "read"}))

    def test_condition_excludes_grant(self) -> None:
        resolver = _resolver([
            {"role": "user", "resource": "post", "action": "read", "condition": ACTIVE_ONLY},
        ])
        query = {"role": "user", "resource": "post", "action": "read"}
        assert _run(resolver.permission({**query, "context": {"status": "active"}})).granted is True
        assert _run(resolver.permission({**query, "context": {"status": "inactive"}})).granted is False
        # no context: the condition cannot hold
        assert _run(resolver.permission(query)).granted is False

    def test_conditioned_variants_union(self) -> None:
        resolver = _resolver([
            {"role": "user", "resource": "post", "action": "read", "attributes": ["title"]},
            {"role": "user", "resource": "post", "action": "read", "attributes": ["body"],
             "condition": {"EQUALS": {"published": True}}},
        ])
        query = {"role": "user", "resource": "post", "action": "read"}
        assert _run(resolver.permission({**query, "context": {"published": True}})).attributes == ("title", "body")
        assert _run(resolver.permission({**query, "context": {"published": False}})).attributes == ("title",)

    def test_multiple_roles_union(self) -> None:
        resolver = _resolver([
            {"role": "a", "resource": "doc", "action": "read", "attributes": ["*", "!secret"]},
            {"role": "b", "resource": "doc", "action": "read", "attributes": ["secret"]},
        ])
        result = _run(resolver.permission({"role": ["a", "b"], "resource": "doc", "action": "read"}))
        assert result.attributes == ("*", "secret")

    def test_inherited_grants(self) -> None:
        resolver = _resolver(grants={
            "user": {"grants": [{"resource": "video", "action": "read", "attributes": ["title"]}]},
            "admin": {"grants": [{"resource": "video", "action": "delete"}], "$extend": {"user": {}}},
        })
        result = _run(resolver.permission({"role": "admin", "resource": "video", "action": "read"}))
        assert result.attributes == ("title",)

    def test_conditioned_extension(self) -> None:
        resolver = _resolver(grants={
            "user": {"grants": [{"resource": "video", "action": "read"}]},
            "night": {"grants": [], "$extend": {"user": {"condition": {"EQUALS": {"shift": "night"}}}}},
        })
        query = {"role": "night", "resource": "video", "action": "read"}
        assert _run(resolver.permission({**query, "context": {"shift": "night"}})).granted is True
        assert _run(resolver.permission({**query, "context": {"shift": "day"}})).granted is False

    def test_resource_and_action_globs(self) -> None:
        resolver = _resolver([{"role": "ops", "resource": "report-*", "action": "*"}])
        result = _run(resolver.permission({"role": "ops", "resource": "report-2024", "action": "export"}))
        assert result.granted is True

    def test_decision_log_carries_no_context(self) -> None:
        resolver = _resolver([{"role": "user", "resource": "post", "action": "read:own"}])
        query = {"role": "user", "resource": "post", "action": "read:own", "context": {"password": "p"}}
        with structlog.testing.capture_logs() as logs:
            _run(resolver.permission(query))
        entry, = [e for e in logs if e["event"] == "permission.resolved"]
        assert entry["roles"] == ["user"]
        assert entry["resource"] == "post"
        assert entry["action"] == "read:own"
        assert entry["granted"] is True
        assert "context" not in entry
        assert "query" not in entry

    def test_explicit_skip_conditions(self) -> None:
        resolver = _resolver([
            {"role": "user", "resource": "post", "action": "read", "condition": ACTIVE_ONLY},
        ])
        query = {"role": "user", "resource": "post", "action": "read", "skip_conditions": True}
        assert _run(resolver.permission(query)).granted is True


# ---------------------------------------------------------------------------
# allowed_* family
# ---------------------------------------------------------------------------


class TestAllowedQueries:
    RECORDS = [
        {"role": "user", "resource": "post", "action": "read", "attributes": ["*"], "condition": ACTIVE_ONLY},
        {"role": "user", "resource": "post", "action": "update:own", "attributes": ["body"]},
        {"role": "user", "resource": "comment", "action": "create:own"},
        {"role": "admin", "resource": "post", "action": ["delete:any", "!update"]},
    ]

    def test_allowed_attributes_skip_conditions_without_context(self) -> None:
        resolver = _resolver(self.RECORDS)
        attrs = _run(resolver.allowed_attributes({"role": "user", "resource": "post", "action": "read"}))
        assert attrs == ("*",)

    def test_allowed_attributes_ignore_conditions_with_context(self) -> None:
        resolver = _resolver([
            {"role": "user", "resource": "post", "action": "read", "attributes": ["title"],
             "condition": ACTIVE_ONLY},
        ])
        query = {"role": "user", "resource": "post", "action": "read", "context": {"status": "inactive"}}
        assert _run(resolver.permission(query)).attributes == ()
        assert _run(resolver.allowed_attributes(query)) == ("title",)

    def test_allowed_family_ignores_conditioned_extensions(self) -> None:
        resolver = _resolver(grants={
            "user": {"grants": [{"resource": "video", "action": "read"}]},
            "night": {"grants": [], "$extend": {"user": {"condition": {"EQUALS": {"shift": "night"}}}}},
        })
        query = {"role": "night", "context": {"shift": "day"}}
        assert _run(resolver.allowed_resources(query)) == ["video"]
        assert _run(resolver.allowed_actions({**query, "resource": "video"})) == ["read:any"]

    def test_allowed_actions(self) -> None:
        resolver = _resolver(self.RECORDS)
        actions = _run(resolver.allowed_actions({"role": ["user", "admin"], "resource": "post"}))
        assert actions == ["read:any", "update:own", "delete:any"]

    def test_allowed_resources(self) -> None:
        resolver = _resolver(self.RECORDS)
        assert _run(resolver.allowed_resources({"role": "user"})) == ["post", "comment"]

    def test_allowed_grants(self) -> None:
        resolver = _resolver(self.RECORDS)
        grants = _run(resolver.allowed_grants({"role": "user", "resource": "comment"}))
        assert [g.resources for g in grants] == [("comment",)]

    def test_negated_action_key(self) -> None:
        resolver = _resolver(self.RECORDS)
        query = {"role": "admin", "resource": "post", "action": "update"}
        assert _run(resolver.allowed_attributes(query)) == ()

    def test_allowing_roles(self) -> None:
        resolver = _resolver(grants={
            "user": {"grants": [{"resource": "video", "action": "read"}]},
            "admin": {"grants": [], "$extend": {"user": {}}},
            "guest": {"grants": []},
        })
        query = {"resource": "video", "action": "read"}
        assert _run(resolver.allowing_roles({**query, "role": ["guest", "admin"]})) == ["admin"]
        assert _run(resolver.allowing_roles(query)) == ["user", "admin"]


# ---------------------------------------------------------------------------
# PermissionResult
# ---------------------------------------------------------------------------


class TestPermissionResult:
    def test_properties(self) -> None:
        info = QueryInfo.of({"role": "u", "resource": "r", "action": "read:own"})
        result = PermissionResult(info, ("*",))
        assert result.roles == ("u",)
        assert result.resource == "r"
        assert result.action == "read:own"
        assert bool(result) is True

    def test_denied_filter_is_empty(self) -> None:
        result = PermissionResult(QueryInfo.of("u"))
        assert result.granted is False
        assert result.filter({"a": 1}) == {}

    def test_filter_lists(self) -> None:
        result = PermissionResult(QueryInfo.of("u"), ("id",))
        assert result.filter([{"id": 1, "x": 2}]) == [{"id": 1}]

    def test_frozen(self) -> None:
        result = PermissionResult(QueryInfo.of("u"))
        with pytest.raises((AttributeError, TypeError)):
            result.attributes = ("*",)  # type: ignore[misc]
