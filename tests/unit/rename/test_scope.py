"""
Tests for scope module.

Covers tier assignment from relationship edges, cast membership and
event participation, and the order scopes are produced in.
"""
from namesweep.rename.models import Chronicle, Entity, Relationship
from namesweep.rename.scope import ScopeSelector, Tier


def ids(scopes):
    return [(s.tier, s.record.id) for s in scopes]


class TestTier:
    """Tests for Tier flags."""

    def test_partials_only_in_close_tiers(self):
        assert Tier.SELF.allows_partials
        assert Tier.RELATED.allows_partials
        assert Tier.CAST.allows_partials
        assert Tier.EVENT_PARTICIPANT.allows_partials
        assert not Tier.GENERAL.allows_partials
        assert not Tier.EVENT_OTHER.allows_partials

    def test_event_metadata_only_for_participants(self):
        assert Tier.EVENT_PARTICIPANT.checks_event_metadata
        assert not Tier.EVENT_OTHER.checks_event_metadata


class TestScopeSelector:
    """Tests for ScopeSelector."""

    def test_related_ids_follow_edges_both_ways(self, entities, chronicles, relationships):
        selector = ScopeSelector("npc-7", entities, chronicles, relationships)
        assert selector.related_entity_ids == ["npc-9", "npc-3"]

    def test_entity_scopes_order(self, entities, chronicles, relationships):
        selector = ScopeSelector("npc-7", entities, chronicles, relationships)
        assert ids(selector.entity_scopes()) == [
            (Tier.SELF, "npc-7"),
            (Tier.RELATED, "npc-9"),
            (Tier.RELATED, "npc-3"),
            (Tier.GENERAL, "loc-1"),
        ]

    def test_no_relationships_means_no_related_tier(self, entities, chronicles):
        selector = ScopeSelector("npc-7", entities, chronicles)
        tiers = [s.tier for s in selector.entity_scopes()]
        assert tiers == [Tier.SELF, Tier.GENERAL, Tier.GENERAL, Tier.GENERAL]

    def test_self_loop_and_duplicate_edges(self):
        entities = [Entity("a", "A"), Entity("b", "B")]
        rels = [
            Relationship("mirror", "a", "a"),
            Relationship("ally_of", "a", "b"),
            Relationship("friend_of", "b", "a"),
        ]
        selector = ScopeSelector("a", entities, [], rels)
        assert selector.related_entity_ids == ["b"]
        assert ids(selector.entity_scopes()) == [(Tier.SELF, "a"), (Tier.RELATED, "b")]

    def test_related_id_missing_from_entities_is_skipped(self):
        selector = ScopeSelector("a", [Entity("a", "A")], [], [Relationship("k", "a", "ghost")])
        assert ids(selector.entity_scopes()) == [(Tier.SELF, "a")]
        assert selector.display_name("ghost") == "ghost"

    def test_chronicle_scopes_cast_first(self):
        chronicles = [
            Chronicle("c1", "One", selected_entity_ids=("x",)),
            Chronicle("c2", "Two", selected_entity_ids=("a",)),
        ]
        selector = ScopeSelector("a", [], chronicles)
        assert ids(selector.chronicle_scopes()) == [(Tier.CAST, "c2"), (Tier.GENERAL, "c1")]

    def test_event_scopes(self, entities, chronicles, relationships, events):
        selector = ScopeSelector("npc-7", entities, chronicles, relationships, events)
        assert ids(selector.event_scopes()) == [
            (Tier.EVENT_PARTICIPANT, "ev-1"),
            (Tier.EVENT_OTHER, "ev-2"),
        ]

    def test_tiers_are_disjoint(self, entities, chronicles, relationships, events):
        selector = ScopeSelector("npc-7", entities, chronicles, relationships, events)
        scopes = selector.entity_scopes() + selector.chronicle_scopes() + selector.event_scopes()
        records = [(type(s.record).__name__, s.record.id) for s in scopes]
        assert len(records) == len(set(records))

    def test_tier_counts(self, entities, chronicles, relationships, events):
        selector = ScopeSelector("npc-7", entities, chronicles, relationships, events)
        assert selector.tier_counts() == {
            "self": 1,
            "related": 2,
            "general": 2,
            "cast": 1,
            "event_participant": 1,
            "event_other": 1,
        }

    def test_display_name(self, entities, chronicles):
        selector = ScopeSelector("npc-7", entities, chronicles)
        assert selector.display_name("npc-9") == "Harl Brand"
