"""
Qdrant vector database service for storing and querying product embeddings.

The store is optional: if the client cannot be created or the collection
cannot be initialised, the service reports itself unavailable and callers
fall back to catalog substring search.
"""

import logging
import uuid
from functools import lru_cache
from typing import Any

from qdrant_client import QdrantClient
from qdrant_client.models import Distance, PointStruct, VectorParams

from smart_shopper.core.config import settings

logger = logging.getLogger(__name__)

# Namespace for deterministic point ids derived from catalog product ids
POINT_NAMESPACE = uuid.UUID("5f0b8f4e-8d5c-4b53-9a55-6a0f3d1c2b7e")


def point_id(product_id: str) -> str:
    return str(uuid.uuid5(POINT_NAMESPACE, product_id))


def build_client() -> QdrantClient:
    if settings.QDRANT_URL:
        return QdrantClient(url=settings.QDRANT_URL)
    if settings.QDRANT_PATH == ":memory:":
        return QdrantClient(location=":memory:")
    return QdrantClient(path=settings.QDRANT_PATH)


class QdrantService:
    """Product vectors in one Qdrant collection, keyed by catalog product id"""

    def __init__(self, client: QdrantClient | None = None, dimension: int | None = None):
        self.collection_name = settings.QDRANT_COLLECTION_NAME
        self.dimension = dimension or settings.EMBEDDING_DIMENSION
        self.client: QdrantClient | None = None
        self.available = False

        if not settings.VECTOR_SEARCH_ENABLED and client is None:
            logger.info("Vector search disabled, using catalog search only")
            return

        try:
            self.client = client or build_client()
            self._initialize_collection()
            self.available = True
        except Exception as e:
            logger.error(f"❌ Qdrant unavailable, falling back to catalog search: {e}")
            self.available = False

    def _initialize_collection(self):
        """Create the collection with the configured dimension unless it exists"""
        collection_names = [col.name for col in self.client.get_collections().collections]

        if self.collection_name not in collection_names:
            self.client.create_collection(
                collection_name=self.collection_name,
                vectors_config=VectorParams(size=self.dimension, distance=Distance.COSINE),
            )
            logger.info(f"✅ Created Qdrant collection: {self.collection_name}")
        else:
            logger.info(f"✅ Using existing Qdrant collection: {self.collection_name}")

    def _require_client(self) -> QdrantClient:
        if not self.available or self.client is None:
            raise RuntimeError("Vector store is not available")
        return self.client

    def add_embeddings(
        self,
        ids: list[str],
        embeddings: list[list[float]],
        metadatas: list[dict[str, Any]],
        documents: list[str],
    ) -> int:
        """
        Upsert product vectors.

        Args:
            ids: Catalog product ids (stored in the payload, hashed into point ids)
            embeddings: List of embedding vectors
            metadatas: List of metadata dictionaries
            documents: List of text documents

        Returns:
            Number of points written
        """
        client = self._require_client()
        points = []
        for i, product_id in enumerate(ids):
            payload = metadatas[i].copy()
            payload["document"] = documents[i]
            payload["product_id"] = product_id
            points.append(PointStruct(id=point_id(product_id), vector=embeddings[i], payload=payload))

        try:
            client.upsert(collection_name=self.collection_name, points=points)
        except Exception as e:
            raise RuntimeError(f"Failed to add embeddings to Qdrant: {e}") from e
        return len(points)

    def get_count(self) -> int:
        """Number of indexed products, 0 when the store is unavailable"""
        if not self.available:
            return 0
        try:
            return self.client.count(collection_name=self.collection_name, exact=True).count
        except Exception as e:
            logger.error(f"Error getting count: {e}")
            return 0

    def query(self, query_embedding: list[float], n_results: int = 5) -> list[dict[str, Any]]:
        """
        Nearest-neighbour lookup.

        Returns:
            List of hits: payload fields plus `product_id` and `score`
            (cosine similarity, higher = more similar)
        """
        client = self._require_client()
        try:
            points = client.query_points(
                collection_name=self.collection_name,
                query=query_embedding,
                limit=n_results,
                with_payload=True,
            ).points
        except Exception as e:
            raise RuntimeError(f"Failed to query Qdrant: {e}") from e

        hits = []
        for point in points:
            payload = dict(point.payload or {})
            payload.pop("document", None)
            payload["score"] = point.score
            hits.append(payload)
        return hits

    def clear(self) -> None:
        """Drop every product vector by recreating the collection"""
        client = self._require_client()
        try:
            client.delete_collection(collection_name=self.collection_name)
            self._initialize_collection()
            logger.info(f"✅ Cleared collection: {self.collection_name}")
        except Exception as e:
            raise RuntimeError(f"Failed to clear collection: {e}") from e


@lru_cache
def get_qdrant_service() -> QdrantService:
    """Process-wide vector store, created on first use"""
    return QdrantService()
