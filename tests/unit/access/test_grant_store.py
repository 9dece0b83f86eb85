"""Unit tests for the grant graph – models, normalization and GrantStore."""

from __future__ import annotations

import asyncio

import pytest

from roleacl.access.grants import ActionKey, Extension, Grant, GrantStore, Possession, split_action
from roleacl.kernel.errors import (
    CycleError,
    InvalidConditionArgsError,
    InvalidGrantsFormatError,
    MissingRequiredFieldError,
    RoleNotFoundError,
)

GRANTS = {
    "user": {
        "grants": [
            {"resource": "profile", "action": "read:own", "attributes": ["*", "!password"]},
            {"resource": "video", "action": "read"},
        ]
    },
    "admin": {
        "grants": [{"resource": "video", "action": ["create:any", "delete:any"]}],
        "$extend": {"user": {}},
    },
}


def _store(grants=GRANTS) -> GrantStore:
    return GrantStore(grants)


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class TestActionKey:
    def test_split_action(self) -> None:
        assert split_action("read:own") == ("read", Possession.OWN)
        assert split_action("read") == ("read", None)
        assert split_action("approve:ANY") == ("approve", Possession.ANY)

    def test_bare_verb_means_any(self) -> None:
        key = ActionKey.parse("update")
        assert key.possession is Possession.ANY
        assert str(key) == "update:any"

    def test_negated(self) -> None:
        key = ActionKey.parse("!delete")
        assert key.negated is True
        assert str(key) == "!delete:any"

    def test_any_key_covers_own_query(self) -> None:
        key = ActionKey.parse("read:any")
        assert key.matches("read", Possession.OWN) is True
        assert key.matches("read", Possession.ANY) is True

    def test_own_key_does_not_cover_any_query(self) -> None:
        key = ActionKey.parse("read:own")
        assert key.matches("read", Possession.OWN) is True
        assert key.matches("read", Possession.ANY) is False
        assert key.matches("read", None) is True

    def test_wildcard_verb(self) -> None:
        assert ActionKey.parse("*").matches("approve", Possession.ANY) is True

    def test_invalid(self) -> None:
        with pytest.raises(InvalidGrantsFormatError):
            ActionKey.parse("")
        with pytest.raises(InvalidGrantsFormatError):
            Possession.parse("mine")


class TestGrant:
    def test_negated_action_excludes(self) -> None:
        grant = Grant(resources=("video",), actions=(ActionKey.parse("*"), ActionKey.parse("!delete")))
        assert grant.matches_action("read", None) is True
        assert grant.matches_action("delete", None) is False

    def test_resource_globs(self) -> None:
        grant = Grant(resources=("vid*", "!video-private"), actions=(ActionKey.parse("read"),))
        assert grant.matches_resource("video") is True
        assert grant.matches_resource("video-private") is False
        assert grant.matches_resource(None) is True

    def test_to_dict(self) -> None:
        grant = Grant(resources=("video",), actions=(ActionKey.parse("read"),))
        assert grant.to_dict() == {"resource": "video", "action": "read:any", "attributes": ["*"]}


# ---------------------------------------------------------------------------
# set_grants
# ---------------------------------------------------------------------------


class TestSetGrants:
    def test_object_shape(self) -> None:
        store = _store()
        assert store.get_roles() == ["user", "admin"]
        assert store.get_role("admin").extends == {"user": Extension()}

    def test_attributes_default_to_everything(self) -> None:
        store = _store()
        video = store.get_role("user").grants[1]
        assert video.attributes == ("*",)

    def test_scores_are_computed(self) -> None:
        store = _store()
        assert store.get_role("user").score == 1
        assert store.get_role("admin").score == 2

    def test_supplied_scores_are_ignored(self) -> None:
        store = GrantStore({"a": {"grants": []}, "b": {"$extend": {"a": 99}}})
        assert store.get_role("b").score == 2

    def test_flat_list_accumulates(self) -> None:
        store = GrantStore([
            {"role": "user", "resource": "post", "action": "read", "attributes": ["title"]},
            {"role": "user", "resource": "post", "action": "read", "attributes": ["body"],
             "condition": {"EQUALS": {"published": True}}},
            {"role": ["editor", "admin"], "resource": "post", "action": "update"},
        ])
        assert len(store.get_role("user").grants) == 2
        assert store.get_roles() == ["user", "editor", "admin"]

    def test_explicit_possession_overrides_suffix(self) -> None:
        store = GrantStore([{"role": "u", "resource": "r", "action": "read:any", "possession": "own"}])
        assert store.get_role("u").grants[0].actions[0].possession is Possession.OWN

    def test_replaces_previous_state(self) -> None:
        store = _store()
        store.set_grants([{"role": "guest", "resource": "video", "action": "read"}])
        assert store.get_roles() == ["guest"]

    @pytest.mark.parametrize("bad", ["grants", 42, None])
    def test_rejects_other_shapes(self, bad) -> None:
        with pytest.raises(InvalidGrantsFormatError):
            GrantStore().set_grants(bad)

    @pytest.mark.parametrize("field", ["role", "resource", "action"])
    def test_missing_required_field(self, field: str) -> None:
        record = {"role": "u", "resource": "r", "action": "read"}
        del record[field]
        with pytest.raises(MissingRequiredFieldError) as exc_info:
            GrantStore([record])
        assert exc_info.value.field == field
        assert isinstance(exc_info.value, InvalidGrantsFormatError)

    def test_role_entry_must_be_mapping(self) -> None:
        with pytest.raises(InvalidGrantsFormatError):
            GrantStore({"user": ["read"]})

    def test_extend_of_undefined_role(self) -> None:
        with pytest.raises(InvalidGrantsFormatError):
            GrantStore({"admin": {"grants": [], "$extend": {"ghost": {}}}})

    def test_cyclic_extend(self) -> None:
        with pytest.raises(CycleError):
            GrantStore({"a": {"$extend": {"b": {}}}, "b": {"$extend": {"a": {}}}})

    def test_malformed_condition(self) -> None:
        with pytest.raises(InvalidConditionArgsError):
            GrantStore([{"role": "u", "resource": "r", "action": "read", "condition": {"AND": 1}}])

    def test_failure_keeps_previous_graph(self) -> None:
        store = _store()
        with pytest.raises(InvalidGrantsFormatError):
            store.set_grants([{"role": "x", "resource": "r"}])
        assert store.get_roles() == ["user", "admin"]

    def test_condition_is_copied(self) -> None:
        condition = {"EQUALS": {"a": 1}}
        store = GrantStore([{"role": "u", "resource": "r", "action": "read", "condition": condition}])
        condition["EQUALS"]["a"] = 2
        assert store.get_role("u").grants[0].condition == {"EQUALS": {"a": 1}}


# ---------------------------------------------------------------------------
# add_grant / export
# ---------------------------------------------------------------------------


class TestAddGrantAndExport:
    def test_add_grant_to_several_roles(self) -> None:
        store = GrantStore()
        store.add_grant({"role": ["a", "b"], "resource": "r", "action": "read"})
        assert store.get_roles() == ["a", "b"]
        assert store.get_role("a").grants == store.get_role("b").grants

    def test_add_grant_validates_before_mutating(self) -> None:
        store = GrantStore()
        with pytest.raises(MissingRequiredFieldError):
            store.add_grant({"role": "a", "resource": "r"})
        assert store.get_roles() == []

    def test_get_grants_round_trips(self) -> None:
        store = _store()
        exported = store.get_grants()
        assert exported["admin"]["$extend"] == {"user": {}}
        again = GrantStore(exported)
        assert again.get_grants() == exported

    def test_get_grants_is_detached(self) -> None:
        store = _store()
        store.get_grants()["user"]["grants"].clear()
        assert len(store.get_role("user").grants) == 2

    def test_reset(self) -> None:
        store = _store()
        store.reset()
        assert store.get_roles() == []
        assert len(store) == 0


# ---------------------------------------------------------------------------
# extend_role / remove_roles
# ---------------------------------------------------------------------------


class TestExtendRole:
    def test_adds_extender_score(self) -> None:
        store = _store()
        store.extend_role("superadmin", "admin")
        assert store.get_role("superadmin").score == 1 + 2
        assert store.get_inherited_roles("superadmin") == ["admin", "user"]

    def test_creates_target_role(self) -> None:
        store = _store()
        store.extend_role("guest", "user")
        assert store.has_role("guest")

    def test_unknown_extender(self) -> None:
        store = _store()
        with pytest.raises(RoleNotFoundError) as exc_info:
            store.extend_role("user", "ghost")
        assert isinstance(exc_info.value, CycleError)
        assert not store.has_role("ghost")

    def test_self_extension(self) -> None:
        store = _store()
        with pytest.raises(CycleError):
            store.extend_role("user", "user")

    def test_transitive_cycle_leaves_graph_unchanged(self) -> None:
        store = _store()
        before = store.get_grants()
        with pytest.raises(CycleError):
            store.extend_role("user", "admin")
        assert store.get_grants() == before

    def test_batch_is_all_or_nothing(self) -> None:
        store = _store()
        store.add_grant({"role": "guest", "resource": "r", "action": "read"})
        with pytest.raises(CycleError):
            store.extend_role(["guest", "user"], "admin")
        assert store.get_role("guest").extends == {}

    def test_re_extend_replaces_condition_only(self) -> None:
        store = _store()
        store.extend_role("guest", "user")
        store.extend_role("guest", "user", {"EQUALS": {"day": "mon"}})
        node = store.get_role("guest")
        assert node.score == 2
        assert node.extends["user"].condition == {"EQUALS": {"day": "mon"}}


class TestRemoveRoles:
    def test_strips_extension_and_score(self) -> None:
        store = _store()
        store.remove_roles("user")
        admin = store.get_role("admin")
        assert admin.extends == {}
        assert admin.score == 1
        assert store.get_roles() == ["admin"]

    def test_role_without_grants_of_its_own(self) -> None:
        store = _store()
        store.extend_role("guest", "user")
        store.remove_roles(["user"])
        assert store.get_role("guest").grants == []
        assert store.get_inherited_roles("guest") == []

    def test_unknown_and_duplicate_names_are_ignored(self) -> None:
        store = _store()
        store.remove_roles(["ghost", "admin", "admin"])
        assert store.get_roles() == ["user"]


# ---------------------------------------------------------------------------
# expand_roles
# ---------------------------------------------------------------------------


class TestExpandRoles:
    def test_transitive(self) -> None:
        store = _store()
        store.extend_role("superadmin", "admin")
        assert asyncio.run(store.expand_roles("superadmin")) == ["superadmin", "admin", "user"]

    def test_unknown_role_is_kept(self) -> None:
        assert asyncio.run(_store().expand_roles(["ghost"])) == ["ghost"]

    def test_conditioned_extension_needs_acceptance(self) -> None:
        store = _store()
        store.extend_role("guest", "user", {"EQUALS": {"ok": True}})

        async def reject(extension: Extension) -> bool:
            return False

        assert asyncio.run(store.expand_roles("guest", reject)) == ["guest"]
        assert asyncio.run(store.expand_roles("guest")) == ["guest", "user"]

    def test_tolerates_cycles_built_behind_its_back(self) -> None:
        store = _store()
        store.get_role("user").extends["admin"] = Extension()
        assert sorted(asyncio.run(store.expand_roles("admin"))) == ["admin", "user"]
