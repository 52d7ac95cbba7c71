"""Tests for the in-memory vector store and cosine similarity."""

import math

import pytest

from mata.config import VectorStoreOptions
from mata.errors import ValidationError
from mata.rag.models import MetadataFilter
from mata.rag.utils import cosine_similarity
from mata.rag.vector_store import VectorStore


@pytest.fixture
def store(small_vector_options):
    return VectorStore(small_vector_options)


class TestCosineSimilarity:
    """Tests for the cosine_similarity function."""

    def test_identical_vectors(self):
        assert cosine_similarity([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]) == pytest.approx(1.0)

    def test_orthogonal_vectors(self):
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == 0.0

    def test_opposite_vectors(self):
        assert cosine_similarity([1.0, 1.0], [-1.0, -1.0]) == pytest.approx(-1.0)

    def test_is_symmetric(self):
        a, b = [0.3, -1.2, 4.0], [2.0, 0.5, -0.7]
        assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))

    def test_scale_invariant(self):
        a, b = [1.0, 2.0, 3.0], [3.0, 1.0, 0.5]
        scaled = [x * 42.0 for x in a]
        assert cosine_similarity(scaled, b) == pytest.approx(cosine_similarity(a, b))

    def test_zero_vector_scores_zero(self):
        assert cosine_similarity([0.0, 0.0, 0.0], [1.0, 2.0, 3.0]) == 0.0

    def test_mismatched_or_empty_vectors_score_zero(self):
        assert cosine_similarity([1.0, 2.0], [1.0, 2.0, 3.0]) == 0.0
        assert cosine_similarity([], []) == 0.0

    def test_result_is_bounded(self):
        value = cosine_similarity([1e-8, 1e-8, 1e-8], [1e-8, 1e-8, 1e-8])
        assert -1.0 <= value <= 1.0


class TestVectorStoreSearch:
    """Tests for VectorStore.search."""

    def test_ranks_by_similarity(self, store, make_document):
        """D1 and D3 are returned best first; the orthogonal D2 is excluded."""
        d1 = make_document([1.0, 0.0, 0.0], content="d1")
        d2 = make_document([0.0, 1.0, 0.0], content="d2")
        d3 = make_document([0.9, 0.1, 0.0], content="d3")
        store.add_documents([d1, d2, d3])

        results = store.search([1.0, 0.0, 0.0], limit=2)

        assert [r.document.content for r in results] == ["d1", "d3"]
        assert results[0].score == pytest.approx(1.0)
        assert results[1].score == pytest.approx(0.9 / math.sqrt(0.82))

    def test_scores_descending_and_above_threshold(self, store, make_document):
        vectors = [[1, 0, 0], [0.8, 0.6, 0], [0.6, 0.8, 0], [0.1, 0.99, 0], [0.7, 0.7, 0.1]]
        store.add_documents([make_document([float(x) for x in v]) for v in vectors])

        results = store.search([1.0, 0.0, 0.0], limit=10)

        scores = [r.score for r in results]
        assert scores == sorted(scores, reverse=True)
        assert all(score >= store.options.similarity_threshold for score in scores)

    def test_ties_keep_insertion_order(self, store, make_document):
        first = make_document([1.0, 0.0, 0.0], content="first")
        second = make_document([2.0, 0.0, 0.0], content="second")
        store.add_documents([first, second])

        results = store.search([1.0, 0.0, 0.0])

        assert [r.document.content for r in results] == ["first", "second"]

    def test_default_limit_is_max_results(self, make_document):
        store = VectorStore(VectorStoreOptions(dimensions=3, similarity_threshold=0.0, max_results=2))
        store.add_documents([make_document([1.0, 0.0, 0.0]) for _ in range(5)])

        assert len(store.search([1.0, 0.0, 0.0])) == 2

    def test_limit_zero_returns_nothing(self, store, make_document):
        store.add_documents([make_document([1.0, 0.0, 0.0])])
        assert store.search([1.0, 0.0, 0.0], limit=0) == []

    def test_negative_limit_rejected(self, store):
        with pytest.raises(ValidationError):
            store.search([1.0, 0.0, 0.0], limit=-1)

    def test_wrong_query_dimensions_rejected(self, store):
        with pytest.raises(ValidationError, match="dimensions"):
            store.search([1.0, 0.0])

    def test_empty_store(self, store):
        assert store.search([1.0, 0.0, 0.0]) == []


class TestVectorStoreAdd:
    """Tests for VectorStore.add_documents."""

    def test_skips_documents_without_valid_embedding(self, store, make_document):
        valid = make_document([1.0, 0.0, 0.0])
        missing = make_document(None)
        wrong_size = make_document([1.0, 0.0])

        accepted = store.add_documents([valid, missing, wrong_size])

        assert accepted == 1
        assert len(store) == 1
        assert store.get(valid.id) is valid
        assert store.get(missing.id) is None

    def test_strict_rejects_whole_batch(self, store, make_document):
        valid = make_document([1.0, 0.0, 0.0])
        wrong_size = make_document([1.0, 0.0])

        with pytest.raises(ValidationError):
            store.add_documents([valid, wrong_size], strict=True)

        assert len(store) == 0

    def test_add_empty_list(self, store):
        assert store.add_documents([]) == 0


class TestVectorStoreMetadata:
    """Tests for metadata filtering, deletion and statistics."""

    def test_search_by_metadata_matches_all_set_fields(self, store, make_document):
        a = make_document([1.0, 0.0, 0.0], source="auth.ts", doc_type="code")
        b = make_document([1.0, 0.0, 0.0], source="auth.ts", doc_type="text")
        c = make_document([1.0, 0.0, 0.0], source="rate.md", doc_type="markdown")
        store.add_documents([a, b, c])

        assert store.search_by_metadata(MetadataFilter(source="auth.ts")) == [a, b]
        assert store.search_by_metadata(MetadataFilter(source="auth.ts", type="code")) == [a]
        assert store.search_by_metadata(MetadataFilter(source="missing")) == []

    def test_empty_filter_matches_everything(self, store, make_document):
        docs = [make_document([1.0, 0.0, 0.0]) for _ in range(3)]
        store.add_documents(docs)

        assert MetadataFilter().is_empty()
        assert store.search_by_metadata(MetadataFilter()) == docs

    def test_delete(self, store, make_document):
        doc = make_document([1.0, 0.0, 0.0])
        store.add_documents([doc])

        assert store.delete(doc.id) is True
        assert store.delete(doc.id) is False
        assert len(store) == 0

    def test_clear_and_stats(self, store, make_document):
        store.add_documents(
            [
                make_document([1.0, 0.0, 0.0], doc_type="code"),
                make_document([0.0, 1.0, 0.0], doc_type="code"),
                make_document([0.0, 0.0, 1.0], doc_type="markdown"),
            ]
        )

        stats = store.get_stats()
        assert stats == {
            "total_documents": 3,
            "type_distribution": {"code": 2, "markdown": 1},
            "dimensions": 3,
        }

        store.clear()
        assert store.get_stats()["total_documents"] == 0
        assert store.search([1.0, 0.0, 0.0]) == []


class TestVectorStoreOptions:
    """Tests for VectorStoreOptions validation."""

    def test_defaults(self):
        options = VectorStoreOptions()
        assert options.dimensions == 4096
        assert options.similarity_threshold == 0.7
        assert options.max_results == 5

    @pytest.mark.parametrize(
        "kwargs",
        [{"dimensions": 0}, {"similarity_threshold": 1.5}, {"max_results": 0}],
    )
    def test_rejects_invalid_values(self, kwargs):
        with pytest.raises(ValidationError):
            VectorStoreOptions(**kwargs)
