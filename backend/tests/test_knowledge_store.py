import pytest
from sqlalchemy.exc import IntegrityError

from campusqa.models.knowledge import KnowledgeEntry


class TestKnowledgeStore:

    def test_search_on_empty_store(self, store, embedder):
        assert store.search(embedder.embed("library hours"), top_k=3) == []

    def test_add_and_search_by_cosine_similarity(self, db, store, embedder):
        library = store.add_entry(
            db,
            cleaned_content="The library is open until 6pm on Saturday.",
            embedding=embedder.embed("The library is open until 6pm on Saturday."),
            embedding_model=embedder.model_name,
        )
        store.add_entry(
            db,
            cleaned_content="The shuttle bus leaves from the north gate.",
            embedding=embedder.embed("The shuttle bus leaves from the north gate."),
            embedding_model=embedder.model_name,
        )

        matches = store.search(embedder.embed("Is the library open on Saturday?"), top_k=2)

        assert len(matches) == 2
        assert matches[0].entry_id == library.id
        assert matches[0].similarity > 0.9
        assert matches[0].similarity >= matches[1].similarity
        assert matches[1].similarity < 0.5

    def test_entry_records_embedding_model(self, db, store, embedder):
        entry = store.add_entry(
            db,
            cleaned_content="Parking permits are sold at the registrar.",
            embedding=embedder.embed("parking permit registrar"),
            embedding_model=embedder.model_name,
            raw_content="parking permits at registrar",
        )

        row = db.get(KnowledgeEntry, entry.id)
        assert row.embedding_model == "fake-bow-v1"
        assert row.raw_content == "parking permits at registrar"
        assert len(row.embedding) == embedder.dimension

    def test_source_post_is_unique(self, db, store, embedder, answer):
        vector = embedder.embed("library")
        store.add_entry(db, cleaned_content="first", embedding=vector, source_post_id=answer.id)

        with pytest.raises(IntegrityError):
            store.add_entry(db, cleaned_content="second", embedding=vector, source_post_id=answer.id)

        assert db.query(KnowledgeEntry).count() == 1
        assert store.client.count(store.collection_name, exact=True).count == 1

    def test_failed_upsert_rolls_back_row(self, db, store, embedder, monkeypatch):
        def broken_upsert(**kwargs):
            raise ConnectionError("qdrant down")

        monkeypatch.setattr(store.client, "upsert", broken_upsert)

        with pytest.raises(ConnectionError):
            store.add_entry(db, cleaned_content="lost", embedding=embedder.embed("library"))

        assert db.query(KnowledgeEntry).count() == 0

    def test_failed_commit_removes_indexed_point(self, db, store, embedder, monkeypatch):
        def broken_commit():
            raise RuntimeError("commit lost")

        monkeypatch.setattr(db, "commit", broken_commit)

        with pytest.raises(RuntimeError):
            store.add_entry(db, cleaned_content="orphan", embedding=embedder.embed("library"))

        monkeypatch.undo()
        assert db.query(KnowledgeEntry).count() == 0
        assert store.client.count(store.collection_name, exact=True).count == 0
        assert store.search(embedder.embed("library"), top_k=3) == []

    def test_exists_helpers(self, db, store, embedder, answer):
        store.add_entry(
            db,
            cleaned_content="cleaned",
            embedding=embedder.embed("library"),
            source_post_id=answer.id,
            raw_content="raw text",
        )

        assert store.exists_for_source_post(db, answer.id)
        assert not store.exists_for_source_post(db, answer.id + 100)
        assert store.exists_for_raw_content(db, "raw text")
        assert not store.exists_for_raw_content(db, "other text")

    def test_delete_entry(self, db, store, embedder):
        entry = store.add_entry(db, cleaned_content="library", embedding=embedder.embed("library"))

        assert store.delete_entry(db, entry.id)
        assert db.query(KnowledgeEntry).count() == 0
        assert store.search(embedder.embed("library"), top_k=3) == []
        assert not store.delete_entry(db, entry.id)

    def test_sync_rebuilds_index_and_reembeds_stale_rows(self, db, store, embedder):
        current = store.add_entry(
            db,
            cleaned_content="The cafeteria menu changes weekly.",
            embedding=embedder.embed("The cafeteria menu changes weekly."),
            embedding_model=embedder.model_name,
        )
        stale = KnowledgeEntry(
            cleaned_content="The library is open on Saturday.",
            embedding=[1.0] * embedder.dimension,
            embedding_model="legacy-model",
        )
        db.add(stale)
        db.commit()

        result = store.sync_from_database(db, embedder)

        assert result == {"indexed": 2, "reembedded": 1}
        db.expire_all()
        assert db.get(KnowledgeEntry, stale.id).embedding_model == embedder.model_name
        matches = store.search(embedder.embed("library saturday"), top_k=1)
        assert matches[0].entry_id == stale.id
        assert store.search(embedder.embed("cafeteria menu"), top_k=1)[0].entry_id == current.id
