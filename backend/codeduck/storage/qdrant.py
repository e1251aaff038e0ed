"""Qdrant vector database backend."""

from __future__ import annotations

import logging
import uuid
from typing import Dict, List, Optional, Sequence

from qdrant_client import QdrantClient
from qdrant_client.models import Distance, PointStruct, QueryRequest, VectorParams

from ..core.errors import VectorIndexError
from ..core.models import CODE_DIM, CODE_SPACE, TEXT_DIM, TEXT_SPACE, CodeEntity, Embedding, SearchHit
from .base import VectorIndex

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION_NAME = "codeduck"
PAYLOAD_KEY = "data"


def collection_params(code_dim: int = CODE_DIM, text_dim: int = TEXT_DIM) -> Dict[str, VectorParams]:
    return {
        CODE_SPACE: VectorParams(size=code_dim, distance=Distance.COSINE),
        TEXT_SPACE: VectorParams(size=text_dim, distance=Distance.COSINE),
    }


class QdrantVectorIndex(VectorIndex):
    """Named-vector collection holding one point per code entity.

    The client is shared and never mutated here, so one instance can serve
    concurrent searches.
    """

    def __init__(
        self,
        client: QdrantClient,
        collection_name: str = DEFAULT_COLLECTION_NAME,
        upsert_batch_size: int = 100,
        code_dim: int = CODE_DIM,
        text_dim: int = TEXT_DIM,
    ):
        if upsert_batch_size < 1:
            raise ValueError(f"upsert_batch_size must be positive, got {upsert_batch_size}")
        self.client = client
        self.collection_name = collection_name
        self.upsert_batch_size = upsert_batch_size
        self.vectors_config = collection_params(code_dim, text_dim)

    def _error(self, message: str) -> VectorIndexError:
        return VectorIndexError(message, collection=self.collection_name)

    def _check_schema(self) -> None:
        info = self.client.get_collection(collection_name=self.collection_name)
        existing = info.config.params.vectors
        if not isinstance(existing, dict):
            raise self._error("exists with a single unnamed vector space; delete it and re-index")

        if set(existing) != set(self.vectors_config):
            raise self._error(
                f"has vector spaces {sorted(existing)}, expected {sorted(self.vectors_config)}"
            )
        for space, expected in self.vectors_config.items():
            actual = existing[space]
            if actual.size != expected.size or actual.distance != expected.distance:
                raise self._error(
                    f"space '{space}' is {actual.size}/{actual.distance}, "
                    f"expected {expected.size}/{expected.distance}"
                )

    def ensure_collection(self) -> None:
        try:
            exists = self.client.collection_exists(collection_name=self.collection_name)
            if exists:
                self._check_schema()
                logger.debug(f"Collection '{self.collection_name}' already exists with matching schema")
                return
            self.client.create_collection(
                collection_name=self.collection_name,
                vectors_config=self.vectors_config,
            )
        except VectorIndexError:
            raise
        except Exception as e:
            logger.error(f"Error preparing collection '{self.collection_name}': {e}")
            raise self._error(f"cannot create or inspect collection: {e}") from e
        logger.info(f"Created collection '{self.collection_name}'")

    def insert(self, embeddings: Sequence[Embedding]) -> int:
        if not embeddings:
            logger.warning("No embeddings to insert")
            return 0

        points = [
            PointStruct(
                id=str(uuid.uuid4()),
                vector=embedding.to_vector_map(),
                payload={PAYLOAD_KEY: embedding.entity.to_payload()},
            )
            for embedding in embeddings
        ]

        batch_size = self.upsert_batch_size
        total_batches = (len(points) + batch_size - 1) // batch_size
        logger.info(f"Uploading {len(points)} points in {total_batches} batches")

        for i in range(0, len(points), batch_size):
            batch = points[i:i + batch_size]
            batch_num = i // batch_size + 1
            try:
                self.client.upsert(
                    collection_name=self.collection_name,
                    points=batch,
                    wait=True,
                )
                logger.debug(f"Uploaded batch {batch_num}/{total_batches}")
            except Exception as e:
                raise self._error(
                    f"failed to upsert batch {batch_num}/{total_batches} "
                    f"(points {i}-{i + len(batch) - 1}): {e}"
                ) from e

        logger.info(f"Saved {len(points)} points to collection '{self.collection_name}'")
        return len(points)

    def search_hits(self, code_vector: List[float], text_vector: List[float], top_k: int = 4) -> List[SearchHit]:
        """Run one query per space and concatenate: code hits, then text hits.

        Entities matching in both spaces appear twice; the lists are not
        merged or re-ranked.
        """
        if top_k < 1:
            raise ValueError(f"top_k must be positive, got {top_k}")

        spaces = [CODE_SPACE, TEXT_SPACE]
        requests = [
            QueryRequest(query=code_vector, using=CODE_SPACE, limit=top_k, with_payload=True, with_vector=False),
            QueryRequest(query=text_vector, using=TEXT_SPACE, limit=top_k, with_payload=True, with_vector=False),
        ]
        try:
            responses = self.client.query_batch_points(
                collection_name=self.collection_name,
                requests=requests,
            )
        except Exception as e:
            logger.error(f"Error searching in collection '{self.collection_name}': {e}")
            raise self._error(f"search failed: {e}") from e

        if len(responses) != len(requests):
            raise self._error(f"expected {len(requests)} result lists, got {len(responses)}")

        hits: List[SearchHit] = []
        for space, response in zip(spaces, responses):
            for point in response.points:
                hits.append(SearchHit(space=space, score=point.score, entity=self._decode(point.payload)))
        return hits

    def _decode(self, payload: Optional[Dict]) -> CodeEntity:
        if not payload or PAYLOAD_KEY not in payload:
            raise self._error(f"search hit is missing the '{PAYLOAD_KEY}' payload")
        try:
            return CodeEntity.from_payload(payload[PAYLOAD_KEY])
        except Exception as e:
            raise self._error(f"search hit payload is not a valid code entity: {e}") from e

    def count(self) -> int:
        try:
            return self.client.count(collection_name=self.collection_name, exact=True).count
        except Exception as e:
            raise self._error(f"count failed: {e}") from e


def make_client(cfg: Dict) -> QdrantClient:
    """Build a Qdrant client from the ``vector_store.qdrant`` config section."""
    qdrant_cfg = cfg.get("vector_store", {}).get("qdrant", {})
    timeout = qdrant_cfg.get("timeout")
    api_key = qdrant_cfg.get("api_key")
    prefer_grpc = bool(qdrant_cfg.get("prefer_grpc", False))

    url = qdrant_cfg.get("url")
    try:
        if url:
            return QdrantClient(url=url, api_key=api_key, prefer_grpc=prefer_grpc, timeout=timeout)
        return QdrantClient(
            host=qdrant_cfg.get("host", "localhost"),
            port=int(qdrant_cfg.get("port", 6333)),
            grpc_port=int(qdrant_cfg.get("grpc_port", 6334)),
            prefer_grpc=prefer_grpc,
            api_key=api_key,
            timeout=timeout,
        )
    except Exception as e:
        raise VectorIndexError(f"Cannot create Qdrant client: {e}") from e


def make_vector_index(cfg: Dict, client: Optional[QdrantClient] = None) -> QdrantVectorIndex:
    qdrant_cfg = cfg.get("vector_store", {}).get("qdrant", {})
    emb_cfg = cfg.get("embedding", {})

    return QdrantVectorIndex(
        client if client is not None else make_client(cfg),
        collection_name=qdrant_cfg.get("collection_name", DEFAULT_COLLECTION_NAME),
        upsert_batch_size=int(qdrant_cfg.get("upsert_batch_size", 100)),
        code_dim=int(emb_cfg.get("code_dim", CODE_DIM)),
        text_dim=int(emb_cfg.get("text_dim", TEXT_DIM)),
    )
