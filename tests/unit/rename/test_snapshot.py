"""
Tests for snapshot module.

Covers loading a corpus directory into typed records, the error cases
that stop a load, and writing entities and plain YAML back out.
"""
import pytest
import yaml

from namesweep.core.exceptions import SnapshotError
from namesweep.rename.models import Entity
from namesweep.rename.snapshot import load_corpus, save_entities, write_yaml


class TestLoadCorpus:
    """Tests for load_corpus."""

    def test_loads_every_record(self, corpus_dir, entities, chronicles, relationships, events):
        corpus = load_corpus(corpus_dir)
        assert corpus.root == corpus_dir
        assert corpus.entities == entities
        assert corpus.chronicles == chronicles
        assert corpus.relationships == relationships
        assert corpus.events == events

    def test_entity_lookup(self, corpus_dir):
        corpus = load_corpus(corpus_dir)
        assert corpus.entity("npc-9").name == "Harl Brand"
        assert corpus.entity("npc-404") is None

    def test_unknown_keys_kept_in_extra(self, corpus_dir):
        corpus = load_corpus(corpus_dir)
        assert corpus.entity("loc-1").extra == {"culture": "coastal"}

    def test_optional_files_may_be_missing(self, tmp_path):
        (tmp_path / "entities.yaml").write_text("- {id: a, name: A}\n", encoding="utf-8")
        corpus = load_corpus(tmp_path)
        assert [e.id for e in corpus.entities] == ["a"]
        assert corpus.chronicles == []
        assert corpus.relationships == []
        assert corpus.events == []

    def test_empty_entities_file(self, tmp_path):
        (tmp_path / "entities.yaml").write_text("", encoding="utf-8")
        assert load_corpus(tmp_path).entities == []

    def test_paths(self, corpus_dir):
        corpus = load_corpus(corpus_dir)
        assert corpus.entities_path == corpus_dir / "entities.yaml"
        assert corpus.events_path == corpus_dir / "events.yaml"
        assert corpus.chronicles_dir == corpus_dir / "chronicles"


class TestLoadCorpusErrors:
    """Tests for corpora that cannot be loaded."""

    def test_missing_directory(self, tmp_path):
        with pytest.raises(SnapshotError, match="not found"):
            load_corpus(tmp_path / "nowhere")

    def test_missing_entities_file(self, tmp_path):
        with pytest.raises(SnapshotError, match="Missing required"):
            load_corpus(tmp_path)

    def test_entities_not_a_list(self, tmp_path):
        (tmp_path / "entities.yaml").write_text("id: a\nname: A\n", encoding="utf-8")
        with pytest.raises(SnapshotError, match="must contain a list"):
            load_corpus(tmp_path)

    def test_invalid_yaml(self, tmp_path):
        (tmp_path / "entities.yaml").write_text("- {id: a\n", encoding="utf-8")
        with pytest.raises(SnapshotError, match="Cannot read"):
            load_corpus(tmp_path)

    def test_record_missing_name(self, tmp_path):
        (tmp_path / "entities.yaml").write_text("- {id: a}\n", encoding="utf-8")
        with pytest.raises(SnapshotError, match="missing 'name'"):
            load_corpus(tmp_path)

    def test_duplicate_entity_ids(self, tmp_path):
        (tmp_path / "entities.yaml").write_text(
            "- {id: a, name: A}\n- {id: a, name: B}\n", encoding="utf-8"
        )
        with pytest.raises(SnapshotError, match="Duplicate"):
            load_corpus(tmp_path)

    def test_chronicle_id_must_match_file_name(self, corpus_dir):
        (corpus_dir / "chronicles" / "chr-9.yaml").write_text(
            "id: chr-8\ntitle: Misfiled\n", encoding="utf-8"
        )
        with pytest.raises(SnapshotError, match="chr-9.yaml"):
            load_corpus(corpus_dir)


class TestWriting:
    """Tests for save_entities and write_yaml."""

    def test_save_entities_round_trip(self, corpus_dir):
        corpus = load_corpus(corpus_dir)
        renamed = [
            Entity("npc-7", "Frost Queen", kind="npc", slug_aliases=("npc-7",))
            if e.id == "npc-7" else e
            for e in corpus.entities
        ]
        save_entities(corpus_dir, renamed)

        reloaded = load_corpus(corpus_dir)
        widow = reloaded.entity("npc-7")
        assert widow.name == "Frost Queen"
        assert widow.slug_aliases == ("npc-7",)
        # keys the new record leaves out are kept from the file
        assert widow.description == "Frost Widow commands the ice."
        assert reloaded.entity("loc-1").extra == {"culture": "coastal"}

    def test_write_yaml_keeps_key_order(self, tmp_path):
        path = tmp_path / "out" / "scan.yaml"
        write_yaml(path, {"entityId": "npc-7", "oldName": "Frost Widow", "matches": []})
        text = path.read_text(encoding="utf-8")
        assert text.index("entityId") < text.index("oldName") < text.index("matches")
        assert yaml.safe_load(text)["oldName"] == "Frost Widow"
