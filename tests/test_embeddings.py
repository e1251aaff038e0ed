"""Tests for the dual-space embedding generator."""

from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from codeduck.core import (
    CODE_DIM,
    TEXT_DIM,
    CodeEntity,
    CodeKind,
    Context,
    EmbeddingError,
    EmbeddingGenerator,
    SentenceTransformersEmbedder,
    make_embedding_generator,
)


def _entity(name, line=1):
    return CodeEntity(
        name=name,
        signature=f"fn {name} ( )",
        kind=CodeKind.FUNCTION,
        line=line,
        line_from=line,
        line_to=line,
        context=Context(module="", file_path="lib.rs", file_name="lib.rs", snippet=f"fn {name}() {{}}"),
    )


class TestEmbedEntities:
    def test_dimensions(self, generator):
        [embedding] = generator.embed_entities([_entity("distance")])

        assert len(embedding.code_vector) == CODE_DIM
        assert len(embedding.text_vector) == TEXT_DIM

    def test_models_receive_canonical_text_in_one_batch(self, generator, code_embedder, text_embedder):
        entities = [_entity("a"), _entity("b", line=2)]

        generator.embed_entities(entities)

        expected = [e.canonical_text() for e in entities]
        assert code_embedder.calls == [expected]
        assert text_embedder.calls == [expected]

    def test_outputs_zipped_by_position(self, generator, code_embedder, text_embedder):
        entities = [_entity("alpha"), _entity("beta", line=5), _entity("gamma", line=9)]

        embeddings = generator.embed_entities(entities)

        assert [e.entity for e in embeddings] == entities
        for embedding in embeddings:
            text = embedding.entity.canonical_text()
            assert embedding.code_vector == code_embedder.embed([text])[0]
            assert embedding.text_vector == text_embedder.embed([text])[0]

    def test_empty_input_skips_models(self, generator, code_embedder, text_embedder):
        assert generator.embed_entities([]) == []
        assert code_embedder.calls == []
        assert text_embedder.calls == []


class TestEmbedQuery:
    def test_query_vectors(self, generator, code_embedder, text_embedder):
        vectors = generator.embed_query("compute distance between two points")

        assert len(vectors.code) == CODE_DIM
        assert len(vectors.text) == TEXT_DIM
        assert code_embedder.calls == [["compute distance between two points"]]
        assert text_embedder.calls == [["compute distance between two points"]]

    def test_query_unpacks_as_pair(self, generator):
        code_vector, text_vector = generator.embed_query("parse config")
        assert (len(code_vector), len(text_vector)) == (CODE_DIM, TEXT_DIM)

    def test_query_needs_only_batch_embed(self):
        code_model = MagicMock(spec=["name", "dimension", "embed"])
        code_model.name, code_model.dimension = "code", CODE_DIM
        code_model.embed.return_value = [[0.0] * CODE_DIM]
        text_model = MagicMock(spec=["name", "dimension", "embed"])
        text_model.name, text_model.dimension = "text", TEXT_DIM
        text_model.embed.return_value = [[0.0] * TEXT_DIM]

        EmbeddingGenerator(code_model, text_model).embed_query("q")

        code_model.embed.assert_called_once_with(["q"])
        text_model.embed.assert_called_once_with(["q"])


class TestFailures:
    def test_model_exception_wrapped(self, text_embedder):
        broken = MagicMock()
        broken.name = "broken-code"
        broken.dimension = CODE_DIM
        broken.embed.side_effect = RuntimeError("CUDA out of memory")
        generator = EmbeddingGenerator(broken, text_embedder)

        with pytest.raises(EmbeddingError) as excinfo:
            generator.embed_entities([_entity("a")])

        assert excinfo.value.model == "broken-code"
        assert "CUDA out of memory" in str(excinfo.value)
        assert isinstance(excinfo.value.__cause__, RuntimeError)

    def test_short_output_rejected(self, code_embedder):
        lossy = MagicMock()
        lossy.name = "lossy"
        lossy.dimension = TEXT_DIM
        lossy.embed.return_value = [[0.0] * TEXT_DIM]
        generator = EmbeddingGenerator(code_embedder, lossy)

        with pytest.raises(EmbeddingError, match="1 vectors for a batch of 2"):
            generator.embed_entities([_entity("a"), _entity("b")])

    def test_wrong_dimension_rejected(self, code_embedder):
        mismatched = MagicMock()
        mismatched.name = "mismatched"
        mismatched.dimension = 512
        mismatched.embed.return_value = [[0.0] * TEXT_DIM]
        generator = EmbeddingGenerator(code_embedder, mismatched)

        with pytest.raises(EmbeddingError, match="expected 512"):
            generator.embed_query("anything")


class TestSentenceTransformersEmbedder:
    def test_encode_normalized_and_converted(self):
        model = MagicMock()
        model.encode.return_value = np.array([[0.6, 0.8], [1.0, 0.0]], dtype=np.float32)

        with patch("sentence_transformers.SentenceTransformer", return_value=model) as ctor:
            embedder = SentenceTransformersEmbedder("some/model", dimension=2, batch_size=8)
            vectors = embedder.embed(["a", "b"])

        ctor.assert_called_once_with("some/model", device=None, trust_remote_code=False, token=None)
        assert model.encode.call_args.kwargs["normalize_embeddings"] is True
        assert model.encode.call_args.kwargs["batch_size"] == 8
        assert vectors == [pytest.approx([0.6, 0.8]), pytest.approx([1.0, 0.0])]
        assert all(isinstance(v, float) for v in vectors[0])

    def test_load_failure_raises_embedding_error(self):
        with patch("sentence_transformers.SentenceTransformer", side_effect=OSError("no such repo")):
            with pytest.raises(EmbeddingError) as excinfo:
                SentenceTransformersEmbedder("missing/model", dimension=384)

        assert excinfo.value.model == "missing/model"

    def test_factory_builds_both_models(self):
        cfg = {
            "embedding": {
                "code_model": "code/model",
                "text_model": "text/model",
                "batch_size": 4,
                "hf_token": "hf_x",
            }
        }
        with patch("sentence_transformers.SentenceTransformer") as ctor:
            generator = make_embedding_generator(cfg)

        assert generator.code_embedder.name == "code/model"
        assert generator.code_embedder.dimension == CODE_DIM
        assert generator.text_embedder.name == "text/model"
        assert generator.text_embedder.dimension == TEXT_DIM
        first, second = ctor.call_args_list
        assert first.kwargs["trust_remote_code"] is True
        assert second.kwargs["trust_remote_code"] is False
        assert first.kwargs["token"] == "hf_x"

    def test_factory_rejects_unknown_backend(self):
        with pytest.raises(EmbeddingError, match="Unsupported"):
            make_embedding_generator({"embedding": {"backend": "openai"}})
