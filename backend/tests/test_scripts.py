import json
from unittest.mock import patch

import pytest

from campusqa.db import seed_knowledge
from campusqa.models.knowledge import KnowledgeEntry
from campusqa.scripts import knowledge_diagnostic


@pytest.fixture
def knowledge_file(tmp_path):
    path = tmp_path / "knowledge.json"
    path.write_text(json.dumps([
        "The library is open until 10pm on weekdays.",
        "Parking permits are sold at the registrar.",
    ]), encoding="utf-8")
    return path


class TestSeedKnowledge:

    def test_main_seeds_file_and_is_rerunnable(self, db, promoter, knowledge_file):
        with patch.object(seed_knowledge, "get_approval_promoter", return_value=promoter):
            assert seed_knowledge.main([str(knowledge_file)]) == 0
            assert seed_knowledge.main([str(knowledge_file)]) == 0

        assert db.query(KnowledgeEntry).count() == 2

    def test_rejects_non_array_file(self, tmp_path):
        path = tmp_path / "knowledge.json"
        path.write_text(json.dumps({"fact": "not a list"}), encoding="utf-8")

        with pytest.raises(ValueError):
            seed_knowledge.load_entries(str(path))

    def test_missing_file_fails(self, tmp_path):
        assert seed_knowledge.main([str(tmp_path / "missing.json")]) == 1

    def test_bundled_knowledge_file_is_a_list_of_strings(self):
        entries = seed_knowledge.load_entries(seed_knowledge.DEFAULT_KNOWLEDGE_FILE)
        assert entries
        assert all(isinstance(e, str) for e in entries)


class TestKnowledgeDiagnostic:

    def test_reports_empty_store(self, store, embedder, capsys):
        assert knowledge_diagnostic.run("library", embedder=embedder, store=store) == 0
        assert "No entries" in capsys.readouterr().out

    def test_marks_matches_above_threshold(self, db, store, embedder, capsys):
        store.add_entry(
            db,
            cleaned_content="The library is open until 6pm on Saturday.",
            embedding=embedder.embed("The library is open until 6pm on Saturday."),
            embedding_model=embedder.model_name,
        )

        knowledge_diagnostic.run("library saturday", embedder=embedder, store=store)

        out = capsys.readouterr().out
        assert "*1. Similarity:" in out
        assert "The library is open until 6pm" in out
