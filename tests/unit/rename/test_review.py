"""
Tests for review module.

Covers default decisions, bulk actions, decision files, statistics,
match grouping and the printable report.
"""
import pytest

from namesweep.core.config import RenameConfig
from namesweep.core.exceptions import DecisionError
from namesweep.rename.apply import apply_entity_patches
from namesweep.rename.models import (
    Decision,
    DecisionAction,
    Entity,
    MatchType,
    RenameScanResult,
)
from namesweep.rename.patches import build_rename_patches
from namesweep.rename.review import (
    DecisionStats,
    ReviewReport,
    accept_all,
    accept_partials,
    apply_overrides,
    default_decisions,
    group_matches,
    load_decisions,
    parse_decisions,
    reject_partials,
    resolve_decisions,
)
from namesweep.rename.scanner import scan_for_references

ACCEPT = DecisionAction.ACCEPT
REJECT = DecisionAction.REJECT
EDIT = DecisionAction.EDIT


@pytest.fixture
def scan(entities, chronicles, relationships, events):
    return scan_for_references(
        "npc-7", "Frost Widow", entities, chronicles, relationships, events
    )


def actions_by_type(scan, decisions):
    result = {}
    for m in scan.matches:
        result.setdefault(m.match_type, set()).add(decisions[m.id].action)
    return result


class TestDefaults:
    """Tests for default decisions."""

    def test_full_and_metadata_accepted(self, scan):
        decisions = default_decisions(scan)
        assert list(decisions) == [m.id for m in scan.matches]
        assert actions_by_type(scan, decisions) == {
            MatchType.FULL: {ACCEPT},
            MatchType.METADATA: {ACCEPT},
            MatchType.PARTIAL: {REJECT},
            MatchType.ID_SLUG: {REJECT},
        }

    def test_configured_default_accept(self, scan):
        config = RenameConfig(default_accept=frozenset({"full"}))
        decisions = default_decisions(scan, config)
        assert actions_by_type(scan, decisions)[MatchType.METADATA] == {REJECT}

    def test_empty_scan(self):
        assert default_decisions(RenameScanResult("x", "X")) == {}


class TestBulkActions:
    """Tests for bulk decision actions."""

    def test_accept_all_drops_edit_text(self):
        decisions = {"rm-1": Decision("rm-1", EDIT, "Queen'"), "rm-2": Decision("rm-2", REJECT)}
        assert accept_all(decisions) == {
            "rm-1": Decision("rm-1", ACCEPT),
            "rm-2": Decision("rm-2", ACCEPT),
        }

    def test_accept_then_reject_partials(self, scan):
        decisions = accept_partials(default_decisions(scan), scan)
        assert actions_by_type(scan, decisions)[MatchType.PARTIAL] == {ACCEPT}

        decisions = reject_partials(decisions, scan)
        assert actions_by_type(scan, decisions)[MatchType.PARTIAL] == {REJECT}
        assert actions_by_type(scan, decisions)[MatchType.FULL] == {ACCEPT}

    def test_bulk_action_does_not_mutate_input(self, scan):
        decisions = default_decisions(scan)
        before = dict(decisions)
        accept_partials(decisions, scan)
        assert decisions == before


class TestAbsorbedPunctuation:
    """Tests for accepts that keep punctuation the match span took in."""

    @pytest.fixture
    def keep_scan(self):
        entity = Entity(
            "npc-1", "Frost Widow", summary="Frost Widow's keep. Ask Frost Widow, then go."
        )
        return scan_for_references("npc-1", "Frost Widow", [entity], [], [], []), entity

    def test_defaults_edit_with_new_name(self, keep_scan):
        scan, _ = keep_scan
        assert [m.matched_text for m in scan.matches] == ["Frost Widow'", "Frost Widow,"]

        decisions = default_decisions(scan, new_name="Frost Queen")
        assert [(d.action, d.edit_text) for d in decisions.values()] == [
            (EDIT, "Frost Queen'"),
            (EDIT, "Frost Queen,"),
        ]

    def test_punctuation_survives_apply(self, keep_scan):
        scan, entity = keep_scan
        decisions = default_decisions(scan, new_name="Frost Queen")
        patches = build_rename_patches(scan, "Frost Queen", decisions.values())
        (renamed,) = apply_entity_patches(
            [entity], patches.entity_patches, "npc-1", "Frost Queen"
        )
        assert renamed.summary == "Frost Queen's keep. Ask Frost Queen, then go."

    def test_without_new_name_plain_accept(self, keep_scan):
        scan, _ = keep_scan
        assert {d.action for d in default_decisions(scan).values()} == {ACCEPT}

    def test_clean_matches_stay_accepts(self, scan):
        decisions = default_decisions(scan, new_name="Frost Queen")
        assert decisions == default_decisions(scan)

    def test_accept_partials_with_new_name(self, scan):
        decisions = accept_partials(default_decisions(scan), scan, new_name="Frost Queen")
        assert decisions["rm-4"] == Decision("rm-4", EDIT, "Frost Queen'")
        assert decisions["rm-9"] == Decision("rm-9", EDIT, "Frost Queen.")
        assert decisions["rm-1"] == Decision("rm-1", ACCEPT)


class TestDecisionFiles:
    """Tests for parsing and loading decisions."""

    def test_parse_list_and_mapping(self):
        items = [{"matchId": "rm-1", "action": "accept"}]
        assert parse_decisions(items) == [Decision("rm-1", ACCEPT)]
        assert parse_decisions({"decisions": items}) == [Decision("rm-1", ACCEPT)]
        assert parse_decisions(None) == []

    def test_parse_edit(self):
        (decision,) = parse_decisions([
            {"matchId": "rm-4", "action": "EDIT", "editText": "Frost Queen'"},
        ])
        assert decision == Decision("rm-4", EDIT, "Frost Queen'")

    @pytest.mark.parametrize("data", [
        "accept everything",
        {"other": []},
        [{"action": "accept"}],
        [{"matchId": "rm-1", "action": "maybe"}],
        [{"matchId": "rm-1", "action": "edit", "editText": 5}],
    ])
    def test_parse_malformed(self, data):
        with pytest.raises(DecisionError):
            parse_decisions(data)

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "decisions.yaml"
        path.write_text(
            "decisions:\n"
            "  - {matchId: rm-4, action: edit, editText: \"Frost Queen'\"}\n"
            "  - {matchId: rm-7, action: reject}\n",
            encoding="utf-8",
        )
        assert load_decisions(path) == [
            Decision("rm-4", EDIT, "Frost Queen'"),
            Decision("rm-7", REJECT),
        ]

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(DecisionError, match="Cannot read"):
            load_decisions(tmp_path / "nope.yaml")

    def test_load_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("decisions: [unclosed\n", encoding="utf-8")
        with pytest.raises(DecisionError):
            load_decisions(path)


class TestOverrides:
    """Tests for laying explicit decisions over defaults."""

    def test_override_wins(self, scan):
        decisions = resolve_decisions(scan, [Decision("rm-2", REJECT)])
        assert decisions["rm-2"].action is REJECT
        assert decisions["rm-3"].action is ACCEPT

    def test_stale_match_id(self, scan):
        with pytest.raises(DecisionError, match="rm-99"):
            resolve_decisions(scan, [Decision("rm-99", ACCEPT)])

    def test_apply_overrides_keeps_input(self):
        base = {"rm-1": Decision("rm-1", ACCEPT)}
        apply_overrides(base, [Decision("rm-1", REJECT)])
        assert base["rm-1"].action is ACCEPT


class TestDecisionStats:
    """Tests for DecisionStats."""

    def test_world_defaults(self, scan):
        stats = DecisionStats.from_decisions(default_decisions(scan), len(scan.matches))
        assert (stats.accepts, stats.rejects, stats.edits, stats.total) == (11, 8, 0, 19)
        assert stats.changes == 11
        assert stats.summary() == "11 accept, 8 reject, 0 edit / 19 total"

    def test_edits_count_as_changes(self):
        decisions = {
            "a": Decision("a", EDIT, "x"),
            "b": Decision("b", ACCEPT),
            "c": Decision("c", REJECT),
        }
        stats = DecisionStats.from_decisions(decisions, 3)
        assert stats.edits == 1
        assert stats.changes == 2


class TestGroupMatches:
    """Tests for group_matches."""

    def test_world_groups(self, scan):
        groups = group_matches(scan)
        assert [(g.label, [m.id for m in g.matches]) for g in groups] == [
            ("This Entity", ["rm-1", "rm-2", "rm-3"]),
            ("Other Entities (2)", ["rm-4", "rm-5"]),
            ("Chronicle Metadata (2)", ["rm-6", "rm-10"]),
            ("Chronicle Text (2)", ["rm-7", "rm-8", "rm-9", "rm-11"]),
            ("Events (2)", ["rm-12", "rm-13", "rm-14", "rm-15", "rm-16"]),
            ("ID References (3 - relationships, chronicle cast)", ["rm-17", "rm-18", "rm-19"]),
        ]

    def test_empty_groups_dropped(self):
        assert group_matches(RenameScanResult("x", "X")) == []


class TestReviewReport:
    """Tests for ReviewReport.summary."""

    def test_scan_header_and_lines(self, scan):
        text = ReviewReport(scan, default_decisions(scan)).summary()
        lines = text.splitlines()

        assert lines[0] == 'References to "Frost Widow" (npc-7)'
        assert '  ✓ rm-2 [full] Frost Widow — description: "Frost Widow"' in lines
        assert '  ✗ rm-4 [partial] Harl Brand — description: "Widow\'"' in lines
        assert any(line.startswith("  · rm-17 [id_slug]") for line in lines)
        assert lines[-1] == "Decisions: 11 accept, 8 reject, 0 edit / 19 total"

    def test_rename_header_and_edit_arrow(self, scan):
        decisions = resolve_decisions(scan, [Decision("rm-4", EDIT, "Frost Queen'")])
        text = ReviewReport(scan, decisions, new_name="Frost Queen").summary()

        assert text.splitlines()[0] == 'Renaming npc-7: "Frost Widow" → "Frost Queen"'
        assert '  ✎ rm-4 [partial] Harl Brand — description: "Widow\'" → "Frost Queen\'"' in text

    def test_undecided_match(self, scan):
        text = ReviewReport(scan, {}).summary()
        assert "  ? rm-1 [partial]" in text

    def test_context_lines(self, scan):
        text = ReviewReport(scan, default_decisions(scan), show_context=True).summary()
        assert "      [Frost Widow] commands the ice." in text
        assert "      Role: antagonist" in text

    def test_no_references(self):
        text = ReviewReport(RenameScanResult("x", "Nobody")).summary()
        assert text.splitlines()[-1] == "No references found."
