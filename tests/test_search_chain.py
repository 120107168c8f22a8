import asyncio

from qdrant_client import QdrantClient

from smart_shopper.schemas.chat import ImageAnalysis
from smart_shopper.services.embedding_service import EmbeddingService
from smart_shopper.services.product_search import ProductSearchService
from smart_shopper.services.qdrant_service import QdrantService
from smart_shopper.services.search_chain import SearchChain, SearchSignal

from tests.fakes import FakeOpenAI, FakeProductStore


def build_chain(store, qdrant_service=None):
    qdrant_service = qdrant_service or QdrantService()
    product_search = ProductSearchService(EmbeddingService(client=FakeOpenAI()), qdrant_service, store)
    return SearchChain(product_search, store)


def test_all_strategies_missing_returns_empty_outcome(product_store):
    chain = build_chain(product_store)
    signal = SearchSignal(product_type="Spaceship", search_terms=["warp drive", "photon torpedo"])

    outcome = asyncio.run(chain.run(signal))

    assert outcome.products == []
    assert outcome.method is None
    assert outcome.query == ""


def test_every_strategy_failing_never_raises(catalog):
    store = FakeProductStore(
        catalog,
        broken={"search_text", "search_by_type", "search_by_term", "search_title_cheapest"},
    )
    chain = build_chain(store)

    outcome = asyncio.run(chain.run(SearchSignal(product_type="Laptop", search_terms=["laptop"])))

    assert outcome.products == []
    assert outcome.method is None


def test_combined_terms_wins_when_catalog_matches(product_store):
    chain = build_chain(product_store)

    outcome = asyncio.run(chain.run(SearchSignal(product_type="Laptop", search_terms=["Dell"])))

    assert outcome.method == "combined_terms"
    assert outcome.query == "Dell"
    assert {p.id for p in outcome.products} == {"dell-inspiron-15", "dell-xps-13"}
    assert all(p.score == 0.8 for p in outcome.products)


def test_combined_terms_joins_at_most_three_terms(product_store):
    chain = build_chain(product_store)
    signal = SearchSignal(search_terms=["one", "two", "three", "four"])

    outcome = asyncio.run(chain.combined_terms(signal))

    assert outcome.query == "one two three"


def test_laptop_image_without_vector_hits_falls_to_product_type(product_store):
    qdrant_service = QdrantService(client=QdrantClient(location=":memory:"), dimension=5)
    assert qdrant_service.available
    chain = build_chain(product_store, qdrant_service)
    analysis = ImageAnalysis(
        analysis="A silver ultrabook on a desk",
        product_type="Laptop",
        search_terms=["silver ultrabook", "thin notebook"],
    )

    outcome = asyncio.run(chain.run(SearchSignal.from_analysis(analysis)))

    assert outcome.method == "product_type"
    assert outcome.query == "Laptop"
    assert len(outcome.products) == 3
    assert all(p.score == 0.85 for p in outcome.products)


def test_unknown_product_type_is_skipped(product_store):
    chain = build_chain(product_store)

    outcome = asyncio.run(chain.product_type(SearchSignal(product_type="Unknown")))

    assert outcome is None


def test_individual_term_stops_at_first_term_with_hits(product_store):
    chain = build_chain(product_store)
    signal = SearchSignal(product_type="Gadget", search_terms=["hologram", "Lenovo", "Dell"])

    outcome = asyncio.run(chain.individual_term(signal))

    assert outcome.method == "individual_term"
    assert outcome.query == "Lenovo"
    assert [p.id for p in outcome.products] == ["lenovo-ideapad-3"]
    assert outcome.products[0].score == 0.75


def test_failing_strategy_falls_through_to_next(catalog):
    store = FakeProductStore(catalog, broken={"search_text", "search_by_type"})
    chain = build_chain(store)

    outcome = asyncio.run(chain.run(SearchSignal(product_type="Printer", search_terms=["HP"])))

    assert outcome.method == "individual_term"
    assert [p.id for p in outcome.products] == ["hp-officejet-9015e"]


def test_category_fallback_lists_priced_before_unpriced(catalog):
    store = FakeProductStore(catalog, broken={"search_text", "search_by_type", "search_by_term"})
    chain = build_chain(store)

    outcome = asyncio.run(chain.run(SearchSignal(product_type="Seating", search_terms=["office chair"])))

    assert outcome.method == "category_fallback"
    assert outcome.query == "chair"
    assert [p.id for p in outcome.products] == ["mesh-chair", "task-chair"]
    assert all(p.score == 0.7 for p in outcome.products)


def test_find_category_word_checks_type_and_terms(product_store):
    chain = build_chain(product_store)

    assert chain.find_category_word(SearchSignal(product_type="Gaming Monitor")) == "monitor"
    assert chain.find_category_word(SearchSignal(search_terms=["wireless keyboard"])) == "keyboard"
    assert chain.find_category_word(SearchSignal(product_type="Vase")) is None


def test_signal_from_text_keeps_three_product_keywords():
    signal = SearchSignal.from_text("  I'm looking for a gaming laptop with backlit keys please ")

    assert signal.search_terms == ["gaming", "laptop", "backlit"]
    assert signal.query == "I'm looking for a gaming laptop with backlit keys please"
    assert signal.product_type == ""


def test_free_text_query_runs_through_the_chain(product_store):
    chain = build_chain(product_store)

    outcome = asyncio.run(chain.run(SearchSignal.from_text("any good laptop deals?")))

    assert outcome.method == "individual_term"
    assert outcome.query == "laptop"
    assert len(outcome.products) == 3


def test_combined_terms_uses_raw_query_without_keywords(product_store):
    chain = build_chain(product_store)

    outcome = asyncio.run(chain.combined_terms(SearchSignal(query="Dell")))

    assert outcome.query == "Dell"
    assert {p.id for p in outcome.products} == {"dell-inspiron-15", "dell-xps-13"}
