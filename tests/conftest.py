"""
conftest.py
-----------
Shared pytest fixtures for namesweep tests.

Provides fixtures for:
- A small world corpus as raw dictionaries and as typed records
- A corpus directory on disk (entities, relationships, events, chronicles)
- A throwaway log directory
"""
import pytest
import yaml
from pathlib import Path

from namesweep.rename.models import Chronicle, Entity, NarrativeEvent, Relationship


# ----- Raw corpus data -----

@pytest.fixture
def entity_dicts():
    """Entities: the renamed widow, an ally, a rival and a bystander."""
    return [
        {
            "id": "npc-7",
            "name": "Frost Widow",
            "kind": "npc",
            "summary": "The Widow rules the northern passes.",
            "description": "Frost Widow commands the ice.",
            "descriptionHistory": ["Frost Widow was once a healer."],
        },
        {
            "id": "npc-9",
            "name": "Harl Brand",
            "kind": "npc",
            "description": "Once the Widow's old ally, Harl now sails alone.",
        },
        {
            "id": "npc-3",
            "name": "Ember Saint",
            "kind": "npc",
            "description": "Ember Saint has hunted Frost Widow for years.",
        },
        {
            "id": "loc-1",
            "name": "Greyshore",
            "kind": "location",
            "description": "A lonely widow walks the shore each dusk.",
            "culture": "coastal",
        },
    ]


@pytest.fixture
def relationship_dicts():
    return [
        {"kind": "ally_of", "src": "npc-7", "dst": "npc-9"},
        {"kind": "rival_of", "src": "npc-3", "dst": "npc-7", "status": "historical"},
    ]


@pytest.fixture
def chronicle_dicts():
    """One chronicle casting the widow, one that only mentions her."""
    return [
        {
            "id": "chr-1",
            "title": "The Long Frost",
            "selectedEntityIds": ["npc-7", "npc-9"],
            "roleAssignments": [
                {"entityId": "npc-7", "entityName": "Frost Widow", "role": "antagonist",
                 "entityKind": "npc"},
                {"entityId": "npc-9", "entityName": "Harl Brand", "role": "protagonist"},
            ],
            "assembledContent": "Frost Widow rose. The Widow smiled.",
            "summary": "Harl defies the Widow.",
        },
        {
            "id": "chr-2",
            "title": "Tides of Greyshore",
            "selectedEntityIds": ["loc-1"],
            "roleAssignments": [
                {"entityId": "loc-1", "entityName": "Greyshore", "role": "setting"},
            ],
            "directives": [
                {"entityId": "npc-7", "entityName": "Frost Widow",
                 "directive": "Mention only in passing"},
            ],
            "finalContent": "Word of Frost Widow reached the widow of the shore.",
        },
    ]


@pytest.fixture
def event_dicts():
    return [
        {
            "id": "ev-1",
            "subject": {"id": "npc-7", "name": "Frost Widow"},
            "action": "betrayal",
            "description": "Frost Widow betrays Harl Brand.",
            "participantEffects": [
                {
                    "entity": {"id": "npc-9", "name": "Harl Brand"},
                    "effects": [
                        {"description": "Lost the Widow's favor",
                         "relatedEntity": {"id": "npc-7", "name": "Frost Widow"}},
                    ],
                },
            ],
        },
        {
            "id": "ev-2",
            "subject": {"id": "loc-1", "name": "Greyshore"},
            "action": "storm",
            "description": "A widow mourns as Frost Widow passes.",
            "participantEffects": [],
        },
    ]


# ----- Typed records -----

@pytest.fixture
def entities(entity_dicts):
    return [Entity.from_dict(d) for d in entity_dicts]


@pytest.fixture
def relationships(relationship_dicts):
    return [Relationship.from_dict(d) for d in relationship_dicts]


@pytest.fixture
def chronicles(chronicle_dicts):
    return [Chronicle.from_dict(d) for d in chronicle_dicts]


@pytest.fixture
def events(event_dicts):
    return [NarrativeEvent.from_dict(d) for d in event_dicts]


# ----- On-disk corpus -----

def dump_yaml(path: Path, data) -> None:
    """Write plain data as YAML, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)


@pytest.fixture
def corpus_dir(tmp_path, entity_dicts, relationship_dicts, chronicle_dicts, event_dicts):
    """Corpus directory holding every fixture record."""
    root = tmp_path / "world"
    dump_yaml(root / "entities.yaml", entity_dicts)
    dump_yaml(root / "relationships.yaml", relationship_dicts)
    dump_yaml(root / "events.yaml", event_dicts)
    for chronicle in chronicle_dicts:
        dump_yaml(root / "chronicles" / f"{chronicle['id']}.yaml", chronicle)
    return root


@pytest.fixture
def log_dir(tmp_path):
    """Log directory that never touches the project tree."""
    return tmp_path / "logs"
